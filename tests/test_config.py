# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Tests for configuration module
"""

import json
from unittest.mock import patch

import pytest

from amplify_config.config import (
    STAGE_ENV_VAR,
    USER_AGENT,
    build_settings,
    load_directives,
    parse_directives,
    resolve_region,
    resolve_stack_name,
)
from amplify_config.exceptions import ConfigurationError, InvalidDirectiveError
from amplify_config.models import OutputFormat

SERVERLESS_YML = """
service: my-app

provider:
  name: aws
  runtime: nodejs18.x

custom:
  amplify:
    - filename: awsconfiguration.json
      type: native
      appClient: WebClient
      s3bucket: disabled
    - filename: src/aws-exports.js
      type: javascript
      appClient: WebClient

resources:
  Resources:
    UserPool:
      Type: AWS::Cognito::UserPool
    WebClient:
      Type: AWS::Cognito::UserPoolClient
      Properties:
        UserPoolId: !Ref UserPool
"""


class TestSettings:
    """Test run settings"""

    def test_stack_name_from_service_and_stage(self, monkeypatch):
        """Test the <service>-<stage> naming convention"""
        monkeypatch.delenv(STAGE_ENV_VAR, raising=False)

        settings = build_settings(service="my-app", stage="prod", region="eu-west-1")

        assert settings.stack_name == "my-app-prod"
        assert settings.stage == "prod"
        assert settings.region == "eu-west-1"
        assert settings.user_agent == USER_AGENT
        assert settings.deployment_bucket_ids == ["ServerlessDeploymentBucket"]

    def test_stage_from_environment(self, monkeypatch):
        """Test the stage defaults to the environment, then 'dev'"""
        monkeypatch.setenv(STAGE_ENV_VAR, "staging")
        assert build_settings(service="my-app", region="us-east-1").stack_name == "my-app-staging"

        monkeypatch.delenv(STAGE_ENV_VAR)
        assert build_settings(service="my-app", region="us-east-1").stack_name == "my-app-dev"

    def test_explicit_stack_name(self):
        """Test an explicit stack name wins over the service name"""
        assert resolve_stack_name("custom-stack", "my-app", "dev") == "custom-stack"

    def test_no_stack_name(self):
        """Test a stack name or service name is required"""
        with pytest.raises(ConfigurationError, match="--stack-name or --service"):
            resolve_stack_name(None, None, "dev")

    def test_deployment_buckets(self):
        """Test extra deployment bucket ids are added to the defaults"""
        settings = build_settings(
            stack_name="my-app-dev", region="us-east-1", deployment_bucket_ids=("DeployBucket",)
        )

        assert settings.deployment_bucket_ids == ["ServerlessDeploymentBucket", "DeployBucket"]

    def test_deployment_buckets_deduplicated(self):
        """Test the default deployment bucket id is not repeated"""
        settings = build_settings(
            stack_name="my-app-dev",
            region="us-east-1",
            deployment_bucket_ids=("ServerlessDeploymentBucket", "DeployBucket"),
        )

        assert settings.deployment_bucket_ids == ["ServerlessDeploymentBucket", "DeployBucket"]

    def test_region_from_environment(self, monkeypatch):
        """Test AWS_REGION is used when no region is given"""
        monkeypatch.setenv("AWS_REGION", "ap-southeast-2")

        assert resolve_region() == "ap-southeast-2"

    @patch("boto3.session.Session")
    def test_region_missing(self, mock_session, monkeypatch):
        """Test an undeterminable region is a configuration error"""
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("AWS_DEFAULT_REGION", raising=False)
        mock_session.return_value.region_name = None

        with pytest.raises(ConfigurationError, match="Region could not be determined"):
            resolve_region()


class TestDirectives:
    """Test directive loading"""

    def test_serverless_yml(self, tmp_path):
        """Test directives are read from custom.amplify"""
        path = tmp_path / "serverless.yml"
        path.write_text(SERVERLESS_YML)

        directives = load_directives(str(path))

        assert [d.filename for d in directives] == ["awsconfiguration.json", "src/aws-exports.js"]
        assert directives[0].format == OutputFormat.NATIVE
        assert directives[0].app_client == "WebClient"
        assert directives[0].storage_disabled
        assert directives[1].format == OutputFormat.SCRIPT_MODULE
        assert directives[1].s3bucket is None

    def test_json_list(self, tmp_path):
        """Test a JSON list of directives"""
        path = tmp_path / "amplify.json"
        path.write_text(json.dumps([{"filename": "schema.json", "type": "schema.json"}]))

        directives = load_directives(str(path))

        assert directives[0].format == OutputFormat.SCHEMA_DOCUMENT

    def test_amplify_key(self, tmp_path):
        """Test a mapping with an 'amplify' list"""
        path = tmp_path / "amplify.yaml"
        path.write_text("amplify:\n  - filename: src/API.ts\n    type: appsync\n")

        directives = load_directives(str(path))

        assert directives[0].format == OutputFormat.CLIENT_CODE

    def test_missing_file(self, tmp_path):
        """Test a missing directive file is a configuration error"""
        with pytest.raises(ConfigurationError, match="not found"):
            load_directives(str(tmp_path / "missing.yml"))

    def test_unparseable_file(self, tmp_path):
        """Test an unparseable directive file is a configuration error"""
        path = tmp_path / "amplify.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Cannot parse"):
            load_directives(str(path))

    def test_no_directive_list(self, tmp_path):
        """Test a document without directives is rejected"""
        path = tmp_path / "amplify.yml"
        path.write_text("service: my-app\n")

        with pytest.raises(InvalidDirectiveError):
            load_directives(str(path))

    @pytest.mark.parametrize(
        "entry",
        [
            {"type": "native"},
            {"filename": "awsconfiguration.json"},
            {"filename": "", "type": "native"},
            {"filename": "config.xml", "type": "xml"},
            "awsconfiguration.json",
        ],
    )
    def test_invalid_directive(self, entry):
        """Test malformed directives are rejected"""
        with pytest.raises(InvalidDirectiveError, match="Invalid Amplify configuration directive"):
            parse_directives([{"filename": "ok.json", "type": "native"}, entry])
