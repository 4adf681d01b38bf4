# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Relationship Resolver Module

Builds the resolved configuration for one directive: picks the app client,
the identity pool that federates it, the storage bucket, and the external
sign-in providers.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .exceptions import ResourceNotFoundError
from .models import (
    AmazonSignin,
    AppClientMetadata,
    ConfigurationDirective,
    FacebookSignin,
    FederatedProviders,
    GoogleSignin,
    GraphApiConfig,
    GraphApiMetadata,
    IdentityPoolConfig,
    IdentityPoolMetadata,
    ResolvedConfiguration,
    ResourceRecord,
    ResourceType,
    RestEndpointConfig,
    StorageConfig,
    UserPoolConfig,
)

logger = logging.getLogger(__name__)

# Identity pool login provider keys
GOOGLE_PROVIDER = "accounts.google.com"
FACEBOOK_PROVIDER = "graph.facebook.com"
AMAZON_PROVIDER = "www.amazon.com"

DEFAULT_DEPLOYMENT_BUCKET_IDS = ("ServerlessDeploymentBucket",)


def records_of_type(
    records: Sequence[ResourceRecord], resource_type: ResourceType
) -> List[ResourceRecord]:
    return [r for r in records if r.resource_type == resource_type]


def select_app_client(
    records: Sequence[ResourceRecord], directive: ConfigurationDirective
) -> Optional[ResourceRecord]:
    """
    Pick the user pool app client for a directive

    An explicitly named client must exist and have a resolved parent pool.
    Otherwise the first described client is used, if any.

    Raises:
        ResourceNotFoundError: If the named client is missing or unresolved
    """
    clients = records_of_type(records, ResourceType.USER_POOL_CLIENT)

    if directive.app_client:
        client = next((r for r in clients if r.logical_id == directive.app_client), None)
        if client is None:
            raise ResourceNotFoundError(
                directive.filename, f"Invalid appClient specified: {directive.app_client}"
            )
        if not isinstance(client.metadata, AppClientMetadata):
            raise ResourceNotFoundError(
                directive.filename,
                f"appClient {directive.app_client} has no resolvable user pool",
            )
        return client

    return next((r for r in clients if isinstance(r.metadata, AppClientMetadata)), None)


def select_identity_pool(
    records: Sequence[ResourceRecord], app_client: Optional[ResourceRecord] = None
) -> Optional[ResourceRecord]:
    """
    Pick the identity pool for a directive

    Args:
        records: Described resources
        app_client: The explicitly requested app client, if any

    Returns:
        The identity pool federating the app client, otherwise the first
        identity pool, or None when the stack has none
    """
    pools = records_of_type(records, ResourceType.IDENTITY_POOL)
    if not pools:
        return None

    if app_client is not None and isinstance(app_client.metadata, AppClientMetadata):
        client_id = app_client.metadata.client_id
        for pool in pools:
            if not isinstance(pool.metadata, IdentityPoolMetadata):
                continue
            if any(p.client_id == client_id for p in pool.metadata.cognito_identity_providers):
                return pool
        logger.debug(
            f"No identity pool federates {app_client.logical_id}; using {pools[0].logical_id}"
        )

    return pools[0]


def select_storage_bucket(
    records: Sequence[ResourceRecord],
    directive: ConfigurationDirective,
    deployment_bucket_ids: Iterable[str] = DEFAULT_DEPLOYMENT_BUCKET_IDS,
) -> Optional[ResourceRecord]:
    """
    Pick the storage bucket for a directive

    The default deployment bucket ids and any extra ids given are never
    selected. 's3bucket: disabled' selects nothing; a named bucket must
    exist; otherwise the first bucket is used.

    Raises:
        ResourceNotFoundError: If the named bucket does not exist
    """
    if directive.storage_disabled:
        return None

    excluded = set(DEFAULT_DEPLOYMENT_BUCKET_IDS) | set(deployment_bucket_ids)
    buckets = [
        r
        for r in records_of_type(records, ResourceType.S3_BUCKET)
        if r.logical_id not in excluded
    ]

    if directive.s3bucket:
        bucket = next((r for r in buckets if r.logical_id == directive.s3bucket), None)
        if bucket is None:
            raise ResourceNotFoundError(
                directive.filename, f"Invalid s3bucket specified: {directive.s3bucket}"
            )
        return bucket

    return buckets[0] if buckets else None


def federated_providers(
    identity_pool: Optional[ResourceRecord],
) -> FederatedProviders:
    """Sign-in blocks for the known external identity providers of a pool"""
    if identity_pool is None or not isinstance(
        identity_pool.metadata, IdentityPoolMetadata
    ):
        return FederatedProviders()

    providers = identity_pool.metadata.supported_login_providers
    return FederatedProviders(
        google=GoogleSignin(client_id=providers[GOOGLE_PROVIDER])
        if GOOGLE_PROVIDER in providers
        else None,
        facebook=FacebookSignin(app_id=providers[FACEBOOK_PROVIDER])
        if FACEBOOK_PROVIDER in providers
        else None,
        amazon=AmazonSignin(app_id=providers[AMAZON_PROVIDER])
        if AMAZON_PROVIDER in providers
        else None,
    )


def rest_endpoint_url(rest_api_id: str, region: str, stage: str) -> str:
    return f"https://{rest_api_id}.execute-api.{region}.amazonaws.com/{stage}"


class ConfigurationResolver:
    """Resolves described resources into per-directive configurations"""

    def __init__(
        self,
        region: str,
        stage: str,
        user_agent: str,
        deployment_bucket_ids: Iterable[str] = DEFAULT_DEPLOYMENT_BUCKET_IDS,
    ):
        """
        Initialize resolver

        Args:
            region: Deployment region, used for buckets and REST APIs
            stage: Deployment stage, used in REST API endpoint URLs
            user_agent: Value written to generated files
            deployment_bucket_ids: Logical ids of buckets that are never selected
        """
        self.region = region
        self.stage = stage
        self.user_agent = user_agent
        self.deployment_bucket_ids = tuple(deployment_bucket_ids)

    def resolve(
        self, records: Sequence[ResourceRecord], directive: ConfigurationDirective
    ) -> ResolvedConfiguration:
        """
        Build the resolved configuration for one directive

        Raises:
            ResourceNotFoundError: If the directive names a missing resource
        """
        config = ResolvedConfiguration(
            user_agent=self.user_agent, project_region=self.region
        )

        app_client = select_app_client(records, directive)
        if app_client is not None:
            client = app_client.metadata
            config.user_pool = UserPoolConfig(
                pool_id=client.user_pool_id,
                region=client.region,
                app_client_id=client.client_id,
                app_client_secret=client.client_secret,
            )

        identity_pool = select_identity_pool(
            records, app_client if directive.app_client else None
        )
        if identity_pool is not None:
            config.identity_pool = IdentityPoolConfig(
                pool_id=identity_pool.physical_id,
                region=identity_pool.physical_id.split(":")[0],
            )
            config.federated = federated_providers(identity_pool)

        graph_api = next(
            (
                r
                for r in records_of_type(records, ResourceType.GRAPHQL_API)
                if isinstance(r.metadata, GraphApiMetadata)
            ),
            None,
        )
        if graph_api is not None:
            api = graph_api.metadata
            config.graph_api = GraphApiConfig(
                endpoint=api.endpoint,
                region=api.region,
                auth_type=api.authentication_type,
                api_key=api.api_key,
            )

        bucket = select_storage_bucket(records, directive, self.deployment_bucket_ids)
        if bucket is not None:
            config.storage = StorageConfig(bucket=bucket.physical_id, region=self.region)

        config.rest_endpoints = [
            RestEndpointConfig(
                name=r.logical_id,
                endpoint=rest_endpoint_url(r.physical_id, self.region, self.stage),
                region=self.region,
            )
            for r in records_of_type(records, ResourceType.REST_API)
        ]

        return config
