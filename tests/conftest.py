# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Pytest configuration file for the amplify-config tests.
"""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

# Set up AWS credentials and region BEFORE any imports that might use boto3
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

from graphql import build_schema, introspection_from_schema  # noqa: E402

from amplify_config.cloud_query import ResourceListing  # noqa: E402
from amplify_config.exceptions import CloudQueryError  # noqa: E402
from amplify_config.models import (  # noqa: E402
    AppClientMetadata,
    CognitoProviderLink,
    GraphApiMetadata,
    IdentityPoolMetadata,
    ResourceRecord,
    ResourceType,
    UserPoolMetadata,
)

STACK_NAME = "my-app-dev"
REGION = "us-east-1"

SCHEMA_SDL = """
enum Status {
  DRAFT
  PUBLISHED
}

input CreatePostInput {
  title: String!
  status: Status
}

type Author {
  id: ID!
  name: String
  posts(first: Int!): [Post]
}

type Comment {
  id: ID!
  content: String
}

type Post {
  id: ID!
  title: String!
  status: Status
  author: Author
  comments(limit: Int): [Comment]
}

union SearchResult = Post | Author

type Query {
  getPost(id: ID!): Post
  listPosts: [Post]
  search(term: String!): [SearchResult]
}

type Mutation {
  createPost(input: CreatePostInput!): Post
}

type Subscription {
  onCreatePost: Post
}
"""


def stack_item(logical_id: str, resource_type: str, physical_id: Optional[str]) -> dict:
    """A StackResourceSummaries entry"""
    item = {"LogicalResourceId": logical_id, "ResourceType": resource_type}
    if physical_id is not None:
        item["PhysicalResourceId"] = physical_id
    return item


class FakeCloudQuery:
    """In-memory control plane: paged stack listings and canned describe responses"""

    def __init__(
        self,
        stacks: Optional[Dict[str, List[List[dict]]]] = None,
        responses: Optional[Dict[tuple, Any]] = None,
    ):
        self.stacks = stacks or {}
        self.responses = responses or {}
        self.calls: List[tuple] = []

    def list_resources(self, stack_name, next_token=None):
        self.calls.append(("cloudformation", "list_stack_resources", stack_name, next_token))
        if stack_name not in self.stacks:
            raise CloudQueryError(
                "cloudformation",
                "list_stack_resources",
                f"Stack with id {stack_name} does not exist",
            )

        pages = self.stacks[stack_name]
        index = int(next_token) if next_token else 0
        following = str(index + 1) if index + 1 < len(pages) else None
        return ResourceListing(items=pages[index], next_token=following)

    def describe(self, service, operation, params):
        self.calls.append((service, operation, params))
        response = self.responses.get((service, operation))
        if response is None:
            raise CloudQueryError(service, operation, "AccessDeniedException")
        if callable(response):
            return response(params)
        return response

    def operations(self) -> List[str]:
        return [f"{call[0]}.{call[1]}" for call in self.calls]


class RecordFactory:
    """Builders for described resource records"""

    def user_pool(self, logical_id="UserPool", pool_id="us-east-1_abc123", stack_name=STACK_NAME):
        return ResourceRecord(
            resource_type=ResourceType.USER_POOL,
            logical_id=logical_id,
            physical_id=pool_id,
            stack_name=stack_name,
            metadata=UserPoolMetadata(user_pool_id=pool_id, name=logical_id),
        )

    def app_client(
        self,
        logical_id="WebClient",
        client_id="webclient123",
        pool_id="us-east-1_abc123",
        secret=None,
        stack_name=STACK_NAME,
        resolved=True,
    ):
        metadata = None
        if resolved:
            metadata = AppClientMetadata(
                client_id=client_id,
                client_name=logical_id,
                user_pool_id=pool_id,
                client_secret=secret,
            )
        return ResourceRecord(
            resource_type=ResourceType.USER_POOL_CLIENT,
            logical_id=logical_id,
            physical_id=client_id,
            stack_name=stack_name,
            metadata=metadata,
        )

    def identity_pool(
        self,
        logical_id="IdentityPool",
        pool_id="us-east-1:11111111-2222-3333-4444-555555555555",
        client_ids=(),
        login_providers=None,
        stack_name=STACK_NAME,
    ):
        return ResourceRecord(
            resource_type=ResourceType.IDENTITY_POOL,
            logical_id=logical_id,
            physical_id=pool_id,
            stack_name=stack_name,
            metadata=IdentityPoolMetadata(
                identity_pool_id=pool_id,
                name=logical_id,
                supported_login_providers=login_providers or {},
                cognito_identity_providers=[
                    CognitoProviderLink(
                        provider_name="cognito-idp.us-east-1.amazonaws.com/us-east-1_abc123",
                        client_id=client_id,
                    )
                    for client_id in client_ids
                ],
            ),
        )

    def graph_api(
        self,
        schema_document=None,
        logical_id="GraphQlApi",
        api_id="api123",
        authentication_type="AMAZON_COGNITO_USER_POOLS",
        api_key=None,
        region="us-west-2",
    ):
        arn = f"arn:aws:appsync:{region}:123456789012:apis/{api_id}"
        return ResourceRecord(
            resource_type=ResourceType.GRAPHQL_API,
            logical_id=logical_id,
            physical_id=arn,
            stack_name=STACK_NAME,
            metadata=GraphApiMetadata(
                api_id=api_id,
                name="my-api",
                arn=arn,
                endpoint=f"https://{api_id}.appsync-api.{region}.amazonaws.com/graphql",
                authentication_type=authentication_type,
                api_key=api_key,
            ),
            schema_document=schema_document,
        )

    def bucket(self, logical_id="UploadBucket", bucket_name="my-app-uploads"):
        return ResourceRecord(
            resource_type=ResourceType.S3_BUCKET,
            logical_id=logical_id,
            physical_id=bucket_name,
            stack_name=STACK_NAME,
        )

    def rest_api(self, logical_id="ApiGatewayRestApi", rest_api_id="abc123def4"):
        return ResourceRecord(
            resource_type=ResourceType.REST_API,
            logical_id=logical_id,
            physical_id=rest_api_id,
            stack_name=STACK_NAME,
        )


@pytest.fixture
def records():
    """Record builders"""
    return RecordFactory()


@pytest.fixture
def schema_document():
    """Introspection result for the test schema"""
    return introspection_from_schema(build_schema(SCHEMA_SDL))


@pytest.fixture
def fixed_clock():
    """Clock that always returns 2024-05-01T12:00:00Z"""
    return lambda: datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
