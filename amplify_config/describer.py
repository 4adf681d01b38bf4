# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Resource Describer Module

Turns resource summaries into described resource records.

Description runs in two passes. The first pass describes every resource that
can be described on its own. User pool app clients need the physical id of
their parent user pool, which is only known once the pools are described, so
they are described in a second pass that consumes a lookup table built from
the first pass's output.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .cloud_query import CloudQuery
from .exceptions import CloudQueryError, DescribeError, SchemaError, TemplateError
from .models import (
    AppClientMetadata,
    CognitoProviderLink,
    GraphApiMetadata,
    IdentityPoolMetadata,
    ResourceRecord,
    ResourceSummary,
    ResourceType,
    UserPoolMetadata,
)
from .template import TemplateProvider

logger = logging.getLogger(__name__)

API_KEY_AUTHENTICATION = "API_KEY"

# (stack name, logical id) -> described user pool
UserPoolIndex = Dict[Tuple[Optional[str], str], ResourceRecord]


def parse_schema_payload(logical_id: str, payload: Any) -> Dict[str, Any]:
    """
    Parse an introspection schema payload into a JSON document

    Args:
        logical_id: Logical id of the GraphQL API (for error messages)
        payload: The 'schema' member of get_introspection_schema; a streaming
            body, bytes or text

    Returns:
        The parsed schema document

    Raises:
        SchemaError: If the payload is empty or not a JSON object
    """
    if hasattr(payload, "read"):
        payload = payload.read()

    try:
        if isinstance(payload, (bytes, bytearray)):
            payload = payload.decode("utf-8")
        if not isinstance(payload, str) or not payload.strip():
            raise SchemaError(logical_id, "empty schema payload")
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SchemaError(logical_id, str(e)) from e

    if not isinstance(document, dict):
        raise SchemaError(logical_id, "schema is not a JSON object")

    return document


def select_api_key(keys: Sequence[Dict[str, Any]], now: float) -> Optional[str]:
    """Id of the unexpired API key with the latest expiry, or None"""
    valid = [k for k in keys if k.get("expires", 0) > now]
    if not valid:
        return None
    return max(valid, key=lambda k: k["expires"]).get("id")


def build_user_pool_index(records: Sequence[ResourceRecord]) -> UserPoolIndex:
    """Index described user pools by the stack and logical id that declare them"""
    return {
        (record.stack_name, record.logical_id): record
        for record in records
        if record.resource_type == ResourceType.USER_POOL
    }


class ResourceDescriber:
    """Fetches type-specific metadata for discovered resources"""

    def __init__(
        self,
        cloud: CloudQuery,
        templates: TemplateProvider,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.cloud = cloud
        self.templates = templates
        # API keys expiring at or before this time are skipped
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._handlers: Dict[
            ResourceType, Callable[[ResourceSummary], ResourceRecord]
        ] = {
            ResourceType.GRAPHQL_API: self._describe_graphql_api,
            ResourceType.IDENTITY_POOL: self._describe_identity_pool,
            ResourceType.USER_POOL: self._describe_user_pool,
            ResourceType.S3_BUCKET: ResourceRecord.from_summary,
            ResourceType.REST_API: ResourceRecord.from_summary,
        }

    def describe(self, summaries: Sequence[ResourceSummary]) -> List[ResourceRecord]:
        """
        Describe all supported resources

        Args:
            summaries: Enumerated resources, in enumeration order

        Returns:
            Resource records: first-pass records in enumeration order,
            followed by the app client records

        Raises:
            DescribeError: If a metadata lookup fails
            SchemaError: If a GraphQL API returns an unparseable schema
        """
        records = self.describe_resources(summaries)
        pools = build_user_pool_index(records)
        records.extend(self.describe_app_clients(summaries, pools))

        logger.info(f"Described {len(records)} resources")
        return records

    def describe_resources(
        self, summaries: Sequence[ResourceSummary]
    ) -> List[ResourceRecord]:
        """First pass: every supported resource except app clients"""
        records = []

        for summary in summaries:
            handler = self._handlers.get(summary.resource_type)
            if handler is None:
                continue

            logger.debug(f"Processing {summary.resource_type.value} {summary.logical_id}")
            records.append(handler(summary))

        return records

    def describe_app_clients(
        self, summaries: Sequence[ResourceSummary], pools: UserPoolIndex
    ) -> List[ResourceRecord]:
        """
        Second pass: user pool app clients

        Args:
            summaries: Enumerated resources, in enumeration order
            pools: Described user pools from the first pass

        Returns:
            One record per app client. Clients whose parent pool cannot be
            resolved get a record without metadata.

        Raises:
            DescribeError: If a client lookup or its stack template fetch fails
        """
        records = []

        for summary in summaries:
            if summary.resource_type != ResourceType.USER_POOL_CLIENT:
                continue

            logger.debug(f"Processing {summary.resource_type.value} {summary.logical_id}")
            try:
                pool_id, parent_logical_id = self._resolve_parent_pool(summary, pools)
            except TemplateError as e:
                raise DescribeError(summary.logical_id, str(e)) from e

            if pool_id is None:
                logger.warning(
                    f"Cannot resolve the user pool of app client {summary.logical_id}"
                )
                records.append(ResourceRecord.from_summary(summary))
                continue

            result = self._fetch(
                summary,
                "cognito-idp",
                "describe_user_pool_client",
                {"UserPoolId": pool_id, "ClientId": summary.physical_id},
            )
            client = result.get("UserPoolClient", {})

            metadata = AppClientMetadata(
                client_id=client.get("ClientId", summary.physical_id),
                client_name=client.get("ClientName", ""),
                user_pool_id=client.get("UserPoolId", pool_id),
                parent_logical_id=parent_logical_id,
                client_secret=client.get("ClientSecret"),
            )
            records.append(ResourceRecord.from_summary(summary, metadata=metadata))

        return records

    def _resolve_parent_pool(
        self, summary: ResourceSummary, pools: UserPoolIndex
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Find the parent pool of an app client from its template declaration

        Returns:
            Tuple of (user pool physical id, user pool logical id); either may
            be None when the declaration cannot be resolved
        """
        template = self.templates.for_stack(summary.stack_name)
        reference = template.get_property(summary.logical_id, "UserPoolId")

        if isinstance(reference, dict) and "Ref" in reference:
            pool = pools.get((summary.stack_name, reference["Ref"]))
            if pool is None:
                return None, reference["Ref"]
            return pool.physical_id, pool.logical_id

        # Imported pools are declared with a literal pool id
        if isinstance(reference, str) and reference:
            return reference, None

        return None, None

    def _fetch(
        self,
        summary: ResourceSummary,
        service: str,
        operation: str,
        params: Dict[str, Any],
    ) -> Dict[str, Any]:
        try:
            return self.cloud.describe(service, operation, params)
        except CloudQueryError as e:
            logger.error(f"Error describing {summary.logical_id}: {e}")
            raise DescribeError(summary.logical_id, str(e)) from e

    def _describe_graphql_api(self, summary: ResourceSummary) -> ResourceRecord:
        # Physical id is the API ARN: arn:aws:appsync:<region>:<account>:apis/<apiId>
        api_id = summary.physical_id.split("/")[-1]

        api = self._fetch(summary, "appsync", "get_graphql_api", {"apiId": api_id}).get(
            "graphqlApi", {}
        )
        schema_result = self._fetch(
            summary,
            "appsync",
            "get_introspection_schema",
            {"apiId": api_id, "format": "JSON"},
        )
        schema_document = parse_schema_payload(
            summary.logical_id, schema_result.get("schema")
        )

        api_key = None
        authentication_type = api.get("authenticationType", "")
        if authentication_type == API_KEY_AUTHENTICATION:
            keys = self._fetch(
                summary, "appsync", "list_api_keys", {"apiId": api_id}
            ).get("apiKeys", [])
            api_key = select_api_key(keys, self.clock().timestamp())
            if api_key is None:
                logger.warning(f"GraphQL API {summary.logical_id} has no unexpired API key")

        metadata = GraphApiMetadata(
            api_id=api.get("apiId", api_id),
            name=api.get("name", ""),
            arn=api.get("arn", summary.physical_id),
            endpoint=api.get("uris", {}).get("GRAPHQL", ""),
            authentication_type=authentication_type,
            api_key=api_key,
        )
        return ResourceRecord.from_summary(
            summary, metadata=metadata, schema_document=schema_document
        )

    def _describe_identity_pool(self, summary: ResourceSummary) -> ResourceRecord:
        result = self._fetch(
            summary,
            "cognito-identity",
            "describe_identity_pool",
            {"IdentityPoolId": summary.physical_id},
        )

        metadata = IdentityPoolMetadata(
            identity_pool_id=result.get("IdentityPoolId", summary.physical_id),
            name=result.get("IdentityPoolName", ""),
            supported_login_providers=result.get("SupportedLoginProviders") or {},
            cognito_identity_providers=[
                CognitoProviderLink(
                    provider_name=provider.get("ProviderName", ""),
                    client_id=provider.get("ClientId", ""),
                )
                for provider in result.get("CognitoIdentityProviders") or []
            ],
        )
        return ResourceRecord.from_summary(summary, metadata=metadata)

    def _describe_user_pool(self, summary: ResourceSummary) -> ResourceRecord:
        pool = self._fetch(
            summary,
            "cognito-idp",
            "describe_user_pool",
            {"UserPoolId": summary.physical_id},
        ).get("UserPool", {})

        metadata = UserPoolMetadata(
            user_pool_id=pool.get("Id", summary.physical_id),
            name=pool.get("Name", ""),
            arn=pool.get("Arn"),
        )
        return ResourceRecord.from_summary(summary, metadata=metadata)
