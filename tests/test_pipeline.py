# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Tests for pipeline module
"""

import io
import json

import pytest
from conftest import FakeCloudQuery, stack_item

from amplify_config.config import Settings
from amplify_config.exceptions import (
    DiscoveryError,
    InvalidDirectiveError,
    ResourceNotFoundError,
)
from amplify_config.models import ConfigurationDirective
from amplify_config.pipeline import ConfigurationPipeline
from amplify_config.writer import ConfigurationWriter

API_ARN = "arn:aws:appsync:us-east-1:123456789012:apis/api123"

TEMPLATE = {
    "Resources": {
        "UserPool": {"Type": "AWS::Cognito::UserPool"},
        "WebClient": {
            "Type": "AWS::Cognito::UserPoolClient",
            "Properties": {"UserPoolId": {"Ref": "UserPool"}},
        },
    }
}


def directives(*entries):
    return [ConfigurationDirective.from_dict(entry) for entry in entries]


@pytest.fixture
def cloud(schema_document):
    return FakeCloudQuery(
        stacks={
            "my-app-dev": [
                [
                    stack_item("ServerlessDeploymentBucket", "AWS::S3::Bucket", "my-app-deployment"),
                    stack_item("WebClient", "AWS::Cognito::UserPoolClient", "webclient123"),
                    stack_item("UserPool", "AWS::Cognito::UserPool", "us-east-1_abc123"),
                ],
                [
                    stack_item("IdentityPool", "AWS::Cognito::IdentityPool", "us-east-1:web"),
                    stack_item("UploadBucket", "AWS::S3::Bucket", "my-app-uploads"),
                    stack_item("GraphQlApi", "AWS::AppSync::GraphQLApi", API_ARN),
                ],
            ]
        },
        responses={
            ("cloudformation", "get_template"): {"TemplateBody": TEMPLATE},
            ("cognito-idp", "describe_user_pool"): {
                "UserPool": {"Id": "us-east-1_abc123", "Name": "users"}
            },
            ("cognito-idp", "describe_user_pool_client"): {
                "UserPoolClient": {
                    "ClientId": "webclient123",
                    "ClientName": "web",
                    "UserPoolId": "us-east-1_abc123",
                }
            },
            ("cognito-identity", "describe_identity_pool"): {
                "IdentityPoolId": "us-east-1:web",
                "IdentityPoolName": "identity",
                "CognitoIdentityProviders": [
                    {"ProviderName": "cognito-idp", "ClientId": "webclient123"}
                ],
            },
            ("appsync", "get_graphql_api"): {
                "graphqlApi": {
                    "apiId": "api123",
                    "arn": API_ARN,
                    "uris": {"GRAPHQL": "https://api123.appsync-api.us-east-1.amazonaws.com/graphql"},
                    "authenticationType": "AMAZON_COGNITO_USER_POOLS",
                }
            },
            ("appsync", "get_introspection_schema"): lambda params: {
                "schema": io.BytesIO(json.dumps(schema_document).encode("utf-8"))
            },
        },
    )


@pytest.fixture
def pipeline(tmp_path, cloud, fixed_clock):
    settings = Settings(stack_name="my-app-dev", region="us-east-1", output_dir=str(tmp_path))
    return ConfigurationPipeline(settings, cloud=cloud, clock=fixed_clock)


class TestConfigurationPipeline:
    """Test end-to-end configuration generation"""

    def test_run(self, pipeline, tmp_path):
        """Test every directive is written in order"""
        result = pipeline.run(
            directives(
                {"filename": "awsconfiguration.json", "type": "native", "appClient": "WebClient"},
                {"filename": "src/aws-exports.js", "type": "javascript"},
                {"filename": "src/graphql/schema.json", "type": "schema.json"},
                {"filename": "src/graphql/operations.graphql", "type": "graphql"},
                {"filename": "src/API.ts", "type": "appsync"},
            )
        )

        assert result.stack_name == "my-app-dev"
        assert result.written == [
            str(tmp_path / "awsconfiguration.json"),
            str(tmp_path / "src/aws-exports.js"),
            str(tmp_path / "src/graphql/schema.json"),
            str(tmp_path / "src/graphql/operations.graphql"),
            str(tmp_path / "src/API.ts"),
        ]

        native = json.loads((tmp_path / "awsconfiguration.json").read_text())
        assert native["CognitoUserPool"]["Default"] == {
            "PoolId": "us-east-1_abc123",
            "Region": "us-east-1",
            "AppClientId": "webclient123",
        }
        assert native["CredentialsProvider"]["CognitoIdentity"]["Default"]["PoolId"] == "us-east-1:web"
        assert native["S3TransferUtility"]["Default"]["Bucket"] == "my-app-uploads"
        assert native["AppSync"]["Default"]["AuthType"] == "AMAZON_COGNITO_USER_POOLS"

        assert "export type GetPostQuery" in (tmp_path / "src/API.ts").read_text()

    def test_app_client_described_after_pools(self, pipeline, cloud):
        """Test app clients are described once their pool is known"""
        pipeline.discover()

        operations = cloud.operations()
        assert operations.index("cognito-idp.describe_user_pool") < operations.index(
            "cognito-idp.describe_user_pool_client"
        )
        client_call = next(c for c in cloud.calls if c[1] == "describe_user_pool_client")
        assert client_call[2] == {"UserPoolId": "us-east-1_abc123", "ClientId": "webclient123"}

    def test_invalid_directive_writes_nothing(self, pipeline, cloud, tmp_path):
        """Test an invalid directive anywhere in the list prevents any output"""
        with pytest.raises(InvalidDirectiveError):
            pipeline.run(
                directives(
                    {"filename": "awsconfiguration.json", "type": "native"},
                    {"filename": "API.kt", "type": "appsync"},
                )
            )

        assert cloud.calls == []
        assert list(tmp_path.iterdir()) == []

    def test_failure_stops_processing(self, pipeline, tmp_path):
        """Test earlier files stay and later directives are skipped after a failure"""
        with pytest.raises(ResourceNotFoundError, match="Invalid appClient specified: Missing"):
            pipeline.run(
                directives(
                    {"filename": "first.json", "type": "native"},
                    {"filename": "second.json", "type": "native", "appClient": "Missing"},
                    {"filename": "third.json", "type": "native"},
                )
            )

        assert (tmp_path / "first.json").exists()
        assert not (tmp_path / "second.json").exists()
        assert not (tmp_path / "third.json").exists()

    def test_discovery_failure(self, tmp_path, fixed_clock):
        """Test discovery failures surface unchanged"""
        settings = Settings(stack_name="missing-stack", region="us-east-1", output_dir=str(tmp_path))
        pipeline = ConfigurationPipeline(settings, cloud=FakeCloudQuery(), clock=fixed_clock)

        with pytest.raises(DiscoveryError):
            pipeline.run(directives({"filename": "awsconfiguration.json", "type": "native"}))

    def test_root_template_file(self, tmp_path, cloud, fixed_clock):
        """Test a local root template is used instead of fetching it"""
        template_path = tmp_path / "cloudformation-template-update-stack.json"
        template_path.write_text(json.dumps(TEMPLATE))
        settings = Settings(
            stack_name="my-app-dev",
            region="us-east-1",
            template_path=str(template_path),
            output_dir=str(tmp_path / "out"),
        )

        ConfigurationPipeline(settings, cloud=cloud, clock=fixed_clock).discover()

        assert "cloudformation.get_template" not in cloud.operations()


class TestConfigurationWriter:
    """Test file writing"""

    def test_creates_directories(self, tmp_path):
        """Test intermediary directories are created"""
        path = ConfigurationWriter(str(tmp_path)).write("a/b/c.json", "{}")

        assert path == tmp_path / "a" / "b" / "c.json"
        assert path.read_text() == "{}"
