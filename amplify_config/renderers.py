# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Renderers Module

Serializes a resolved configuration into the native awsconfiguration.json
document and the aws-exports JavaScript / TypeScript modules.

The two shapes are consumed by different client libraries: the native file
uses nested PascalCase sections, the modules use flat snake_case keys.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

from .models import ResolvedConfiguration

GENERATED_WARNING = "// WARNING: DO NOT EDIT.  This file is automatically generated"

# Declared for every optional key, whether or not a stack provides it
TYPESCRIPT_INTERFACE = """// aws-exports interface version 1
export interface AwsCloudLogicEndpoint {
    name: string;
    endpoint: string;
    region: string;
}

export interface AwsExports {
    aws_project_region: string;
    aws_cognito_region?: string;
    aws_user_pools_id?: string;
    aws_user_pools_web_client_id?: string;
    aws_user_pools_web_client_secret?: string;
    aws_cognito_identity_pool_id?: string;
    aws_appsync_graphqlEndpoint?: string;
    aws_appsync_region?: string;
    aws_appsync_authenticationType?: string;
    aws_appsync_apiKey?: string;
    aws_user_files_s3_bucket?: string;
    aws_user_files_s3_bucket_region?: string;
    aws_cloud_logic_custom?: AwsCloudLogicEndpoint[];
    aws_google_web_client_id?: string;
    aws_facebook_app_id?: string;
    aws_amazon_app_id?: string;
}
"""


def to_native(config: ResolvedConfiguration) -> Dict[str, Any]:
    """Build the awsconfiguration.json document"""
    native: Dict[str, Any] = {"UserAgent": config.user_agent, "Version": config.version}

    if config.user_pool:
        default = {
            "PoolId": config.user_pool.pool_id,
            "Region": config.user_pool.region,
            "AppClientId": config.user_pool.app_client_id,
        }
        if config.user_pool.app_client_secret:
            default["AppClientSecret"] = config.user_pool.app_client_secret
        native["CognitoUserPool"] = {"Default": default}

    if config.identity_pool:
        native["CredentialsProvider"] = {
            "CognitoIdentity": {
                "Default": {
                    "PoolId": config.identity_pool.pool_id,
                    "Region": config.identity_pool.region,
                }
            }
        }

    if config.graph_api:
        default = {
            "ApiUrl": config.graph_api.endpoint,
            "Region": config.graph_api.region,
            "AuthType": config.graph_api.auth_type,
        }
        if config.graph_api.api_key:
            default["ApiKey"] = config.graph_api.api_key
        native["AppSync"] = {"Default": default}

    if config.storage:
        native["S3TransferUtility"] = {
            "Default": {"Bucket": config.storage.bucket, "Region": config.storage.region}
        }

    if config.rest_endpoints:
        native["APIGateway"] = {
            endpoint.name: {"Endpoint": endpoint.endpoint, "Region": endpoint.region}
            for endpoint in config.rest_endpoints
        }

    federated = config.federated
    if federated.google:
        native["GoogleSignin"] = {
            "Permissions": federated.google.permissions,
            "ClientId-WebApp": federated.google.client_id,
        }
    if federated.facebook:
        native["FacebookSignin"] = {
            "AppId": federated.facebook.app_id,
            "Permissions": federated.facebook.permissions,
        }
    if federated.amazon:
        native["AmazonSignin"] = {
            "AppId": federated.amazon.app_id,
            "Permissions": federated.amazon.permissions,
        }

    return native


def to_script_fields(config: ResolvedConfiguration) -> Dict[str, Any]:
    """Build the flat aws-exports key set"""
    fields: Dict[str, Any] = {"aws_project_region": config.project_region}

    if config.user_pool:
        fields["aws_cognito_region"] = config.user_pool.region
        fields["aws_user_pools_id"] = config.user_pool.pool_id
        fields["aws_user_pools_web_client_id"] = config.user_pool.app_client_id
        if config.user_pool.app_client_secret:
            fields["aws_user_pools_web_client_secret"] = config.user_pool.app_client_secret

    if config.identity_pool:
        fields.setdefault("aws_cognito_region", config.identity_pool.region)
        fields["aws_cognito_identity_pool_id"] = config.identity_pool.pool_id

    if config.graph_api:
        fields["aws_appsync_graphqlEndpoint"] = config.graph_api.endpoint
        fields["aws_appsync_region"] = config.graph_api.region
        fields["aws_appsync_authenticationType"] = config.graph_api.auth_type
        if config.graph_api.api_key:
            fields["aws_appsync_apiKey"] = config.graph_api.api_key

    if config.storage:
        fields["aws_user_files_s3_bucket"] = config.storage.bucket
        fields["aws_user_files_s3_bucket_region"] = config.storage.region

    if config.rest_endpoints:
        fields["aws_cloud_logic_custom"] = [
            {"name": e.name, "endpoint": e.endpoint, "region": e.region}
            for e in config.rest_endpoints
        ]

    federated = config.federated
    if federated.google:
        fields["aws_google_web_client_id"] = federated.google.client_id
    if federated.facebook:
        fields["aws_facebook_app_id"] = federated.facebook.app_id
    if federated.amazon:
        fields["aws_amazon_app_id"] = federated.amazon.app_id

    return fields


def format_timestamp(generated_at: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    return (
        generated_at.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _header(config: ResolvedConfiguration, generated_at: datetime) -> List[str]:
    return [
        GENERATED_WARNING,
        f"// Written by {config.user_agent} on {format_timestamp(generated_at)}",
        "",
    ]


def render_native(config: ResolvedConfiguration) -> str:
    return json.dumps(to_native(config), indent=2)


def render_script_module(config: ResolvedConfiguration, generated_at: datetime) -> str:
    literal = json.dumps(to_script_fields(config), indent=4)
    lines = _header(config, generated_at) + [
        f"const awsmobile = {literal};",
        "",
        "export default awsmobile;",
        "",
    ]
    return "\n".join(lines)


def render_typed_script_module(
    config: ResolvedConfiguration, generated_at: datetime
) -> str:
    literal = json.dumps(to_script_fields(config), indent=4)
    lines = _header(config, generated_at) + [
        TYPESCRIPT_INTERFACE,
        f"const awsmobile: AwsExports = {literal};",
        "",
        "export default awsmobile;",
        "",
    ]
    return "\n".join(lines)
