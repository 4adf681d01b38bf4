# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Cloud Query Module

Control-plane access used by discovery and description. The pipeline only
depends on the CloudQuery protocol; Boto3CloudQuery is the AWS implementation.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from .exceptions import CloudQueryError

logger = logging.getLogger(__name__)


class ResourceListing(BaseModel):
    """One page of stack resources"""

    items: List[Dict[str, Any]] = Field(default_factory=list)
    next_token: Optional[str] = None


class CloudQuery(Protocol):
    """Generic request/response access to the cloud control plane"""

    def list_resources(
        self, stack_name: str, next_token: Optional[str] = None
    ) -> ResourceListing: ...

    def describe(
        self, service: str, operation: str, params: Dict[str, Any]
    ) -> Dict[str, Any]: ...


class Boto3CloudQuery:
    """CloudQuery backed by boto3 clients, created lazily per service"""

    def __init__(self, region: Optional[str] = None):
        """
        Initialize the query client

        Args:
            region: AWS region (defaults to session region)
        """
        self.region = region
        self._clients: Dict[str, Any] = {}

    def _client(self, service: str):
        if service not in self._clients:
            self._clients[service] = boto3.client(service, region_name=self.region)
        return self._clients[service]

    def list_resources(
        self, stack_name: str, next_token: Optional[str] = None
    ) -> ResourceListing:
        """
        List one page of stack resources

        Args:
            stack_name: Stack name or stack id
            next_token: Continuation token from the previous page

        Returns:
            ResourceListing with the page items and the next token, if any
        """
        params = {"StackName": stack_name}
        if next_token:
            params["NextToken"] = next_token

        result = self.describe("cloudformation", "list_stack_resources", params)
        return ResourceListing(
            items=result.get("StackResourceSummaries", []),
            next_token=result.get("NextToken"),
        )

    def describe(
        self, service: str, operation: str, params: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Call a control-plane operation

        Args:
            service: boto3 service name (e.g. 'cognito-idp')
            operation: boto3 operation name (e.g. 'describe_user_pool')
            params: Operation parameters

        Returns:
            The raw operation response

        Raises:
            CloudQueryError: If the request fails
        """
        logger.debug(f"fetch({service}, {operation}, {json.dumps(params, default=str)})")
        client = self._client(service)

        try:
            return getattr(client, operation)(**params)
        except (ClientError, BotoCoreError) as e:
            raise CloudQueryError(service, operation, str(e)) from e
