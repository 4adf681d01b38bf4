# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Amplify Config Models

Pydantic models for discovered resources, caller directives and the
per-directive resolved configuration.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import InvalidDirectiveError

# Value of a directive's s3bucket field that suppresses storage configuration
STORAGE_DISABLED = "disabled"


class ResourceType(str, Enum):
    """CloudFormation resource types understood by the pipeline."""

    GRAPHQL_API = "AWS::AppSync::GraphQLApi"
    IDENTITY_POOL = "AWS::Cognito::IdentityPool"
    USER_POOL = "AWS::Cognito::UserPool"
    USER_POOL_CLIENT = "AWS::Cognito::UserPoolClient"
    S3_BUCKET = "AWS::S3::Bucket"
    REST_API = "AWS::ApiGateway::RestApi"
    NESTED_STACK = "AWS::CloudFormation::Stack"
    OTHER = "Other"

    @classmethod
    def from_cfn(cls, resource_type: str) -> "ResourceType":
        """Map a CloudFormation type string, falling back to OTHER."""
        try:
            return cls(resource_type)
        except ValueError:
            return cls.OTHER


class OutputFormat(str, Enum):
    """Output formats, keyed by the directive 'type' value."""

    NATIVE = "native"
    SCRIPT_MODULE = "javascript"
    TYPED_SCRIPT_MODULE = "typescript"
    SCHEMA_DOCUMENT = "schema.json"
    OPERATION_STUBS = "graphql"
    CLIENT_CODE = "appsync"


# ============================================================================
# Discovery Models
# ============================================================================


class ResourceSummary(BaseModel):
    """A single stack resource as returned by the stack listing."""

    model_config = ConfigDict(frozen=True)

    resource_type: ResourceType = Field(description="Classified resource type")
    logical_id: str = Field(description="Logical resource id in the template")
    physical_id: str = Field(description="Physical resource id (name, id or ARN)")
    stack_name: Optional[str] = Field(
        default=None, description="Name of the stack that declares the resource"
    )

    @property
    def key(self) -> tuple:
        return (self.resource_type, self.physical_id)


class GraphApiMetadata(BaseModel):
    """Metadata of an AppSync GraphQL API."""

    model_config = ConfigDict(frozen=True)

    api_id: str
    name: str = ""
    arn: str
    endpoint: str = Field(description="GRAPHQL endpoint URI")
    authentication_type: str
    api_key: Optional[str] = None

    @property
    def region(self) -> str:
        return self.arn.split(":")[3]


class CognitoProviderLink(BaseModel):
    """A user pool app client federated into an identity pool."""

    model_config = ConfigDict(frozen=True)

    provider_name: str
    client_id: str


class IdentityPoolMetadata(BaseModel):
    """Metadata of a Cognito identity pool."""

    model_config = ConfigDict(frozen=True)

    identity_pool_id: str
    name: str = ""
    supported_login_providers: Dict[str, str] = Field(default_factory=dict)
    cognito_identity_providers: List[CognitoProviderLink] = Field(
        default_factory=list
    )

    @property
    def region(self) -> str:
        return self.identity_pool_id.split(":")[0]


class UserPoolMetadata(BaseModel):
    """Metadata of a Cognito user pool."""

    model_config = ConfigDict(frozen=True)

    user_pool_id: str
    name: str = ""
    arn: Optional[str] = None

    @property
    def region(self) -> str:
        return self.user_pool_id.split("_")[0]


class AppClientMetadata(BaseModel):
    """Metadata of a Cognito user pool app client, including its parent pool."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_name: str = ""
    user_pool_id: str
    parent_logical_id: Optional[str] = None
    client_secret: Optional[str] = None

    @property
    def region(self) -> str:
        return self.user_pool_id.split("_")[0]


ResourceMetadata = Union[
    GraphApiMetadata, IdentityPoolMetadata, UserPoolMetadata, AppClientMetadata
]


class ResourceRecord(BaseModel):
    """A described resource: the summary plus type-specific metadata."""

    model_config = ConfigDict(frozen=True)

    resource_type: ResourceType
    logical_id: str
    physical_id: str
    stack_name: Optional[str] = None
    metadata: Optional[ResourceMetadata] = None
    schema_document: Optional[Dict[str, Any]] = Field(
        default=None, description="Parsed introspection schema (GraphQL APIs only)"
    )

    @classmethod
    def from_summary(
        cls,
        summary: ResourceSummary,
        metadata: Optional[ResourceMetadata] = None,
        schema_document: Optional[Dict[str, Any]] = None,
    ) -> "ResourceRecord":
        return cls(
            resource_type=summary.resource_type,
            logical_id=summary.logical_id,
            physical_id=summary.physical_id,
            stack_name=summary.stack_name,
            metadata=metadata,
            schema_document=schema_document,
        )


# ============================================================================
# Directive Models
# ============================================================================


class ConfigurationDirective(BaseModel):
    """A caller-supplied request for one output file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    filename: str = Field(min_length=1, description="Output file path")
    format: OutputFormat = Field(alias="type", description="Output format")
    app_client: Optional[str] = Field(
        default=None, alias="appClient", description="Logical id of the app client"
    )
    s3bucket: Optional[str] = Field(
        default=None, description="Logical id of the bucket, or 'disabled'"
    )

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def storage_disabled(self) -> bool:
        return self.s3bucket == STORAGE_DISABLED

    @classmethod
    def from_dict(cls, data: Any) -> "ConfigurationDirective":
        """
        Validate a raw directive mapping

        Raises:
            InvalidDirectiveError: If the mapping is not a valid directive
        """
        if not isinstance(data, dict):
            raise InvalidDirectiveError(
                f"Invalid Amplify configuration directive for {json.dumps(data, default=str)}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidDirectiveError(
                f"Invalid Amplify configuration directive for {json.dumps(data, default=str)}: "
                f"{e.error_count()} validation error(s)",
                directive=data,
            ) from e


# ============================================================================
# Resolved Configuration Models
# ============================================================================


class UserPoolConfig(BaseModel):
    pool_id: str
    region: str
    app_client_id: str
    app_client_secret: Optional[str] = None


class IdentityPoolConfig(BaseModel):
    pool_id: str
    region: str


class GraphApiConfig(BaseModel):
    endpoint: str
    region: str
    auth_type: str
    api_key: Optional[str] = None


class StorageConfig(BaseModel):
    bucket: str
    region: str


class RestEndpointConfig(BaseModel):
    name: str
    endpoint: str
    region: str


class GoogleSignin(BaseModel):
    client_id: str
    permissions: str = "email,profile,openid"


class FacebookSignin(BaseModel):
    app_id: str
    permissions: str = "public_profile"


class AmazonSignin(BaseModel):
    app_id: str
    permissions: str = "profile"


class FederatedProviders(BaseModel):
    google: Optional[GoogleSignin] = None
    facebook: Optional[FacebookSignin] = None
    amazon: Optional[AmazonSignin] = None


class ResolvedConfiguration(BaseModel):
    """
    Working set for one directive.

    Every section is optional; absent sections are None (or empty) and are
    never serialized.
    """

    user_agent: str
    version: str = "1.0"
    project_region: str
    user_pool: Optional[UserPoolConfig] = None
    identity_pool: Optional[IdentityPoolConfig] = None
    graph_api: Optional[GraphApiConfig] = None
    storage: Optional[StorageConfig] = None
    rest_endpoints: List[RestEndpointConfig] = Field(default_factory=list)
    federated: FederatedProviders = Field(default_factory=FederatedProviders)
