# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Configuration Module

Run settings (stack, region, stage) and loading of the directive list.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence

import boto3
import yaml
from pydantic import BaseModel, Field

from . import __version__
from .exceptions import ConfigurationError, InvalidDirectiveError
from .models import ConfigurationDirective
from .resolver import DEFAULT_DEPLOYMENT_BUCKET_IDS
from .template import CloudFormationLoader

logger = logging.getLogger(__name__)

STAGE_ENV_VAR = "AMPLIFY_CONFIG_STAGE"
DEFAULT_STAGE = "dev"
USER_AGENT = f"amplify-config/{__version__}"


class Settings(BaseModel):
    """Settings for one pipeline run"""

    stack_name: str = Field(description="Root CloudFormation stack name")
    region: str = Field(description="AWS region of the stack")
    stage: str = Field(default=DEFAULT_STAGE, description="Deployment stage")
    template_path: Optional[str] = Field(
        default=None, description="Compiled template of the root stack"
    )
    deployment_bucket_ids: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DEPLOYMENT_BUCKET_IDS),
        description="Logical ids of deployment buckets, never used for storage",
    )
    user_agent: str = USER_AGENT
    output_dir: str = "."


def resolve_region(region: Optional[str] = None) -> str:
    """
    Determine the AWS region

    Order: explicit value, AWS_REGION, AWS_DEFAULT_REGION, boto3 session.

    Raises:
        ConfigurationError: If no region can be determined
    """
    region = (
        region
        or os.environ.get("AWS_REGION")
        or os.environ.get("AWS_DEFAULT_REGION")
        or boto3.session.Session().region_name
    )
    if not region:
        raise ConfigurationError(
            "Region could not be determined. Please specify --region or configure AWS_DEFAULT_REGION"
        )
    return region


def resolve_stack_name(
    stack_name: Optional[str], service: Optional[str], stage: str
) -> str:
    """Explicit stack name, or the '<service>-<stage>' naming convention"""
    if stack_name:
        return stack_name
    if service:
        return f"{service}-{stage}"
    raise ConfigurationError("Either --stack-name or --service is required")


def build_settings(
    stack_name: Optional[str] = None,
    service: Optional[str] = None,
    stage: Optional[str] = None,
    region: Optional[str] = None,
    template_path: Optional[str] = None,
    deployment_bucket_ids: Optional[Sequence[str]] = None,
    output_dir: str = ".",
) -> Settings:
    """
    Build run settings from CLI values and the environment

    Args:
        stack_name: Root stack name (optional when service is given)
        service: Service name, combined with stage into the stack name
        stage: Deployment stage (default: AMPLIFY_CONFIG_STAGE or 'dev')
        region: AWS region (optional)
        template_path: Compiled template file of the root stack (optional)
        deployment_bucket_ids: Extra deployment bucket logical ids, excluded
            from storage selection along with the defaults (optional)
        output_dir: Base directory for relative output file names

    Returns:
        Settings
    """
    stage = stage or os.environ.get(STAGE_ENV_VAR) or DEFAULT_STAGE

    settings = Settings(
        stack_name=resolve_stack_name(stack_name, service, stage),
        region=resolve_region(region),
        stage=stage,
        template_path=template_path,
        output_dir=output_dir,
    )
    if deployment_bucket_ids:
        settings.deployment_bucket_ids = list(
            dict.fromkeys([*DEFAULT_DEPLOYMENT_BUCKET_IDS, *deployment_bucket_ids])
        )

    return settings


def _read_document(config_path: str) -> Any:
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Directive file not found: {config_path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yml", ".yaml"):
            return yaml.load(text, Loader=CloudFormationLoader)
        return json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse directive file {config_path}: {e}") from e


def _directive_entries(document: Any) -> list:
    entries = document
    if isinstance(document, dict):
        if "amplify" in document:
            entries = document["amplify"]
        elif isinstance(document.get("custom"), dict) and "amplify" in document["custom"]:
            # serverless.yml keeps the directives under custom.amplify
            entries = document["custom"]["amplify"]

    if not isinstance(entries, list):
        raise InvalidDirectiveError(
            "Directive file must contain a list of directives or an 'amplify' list"
        )
    return entries


def parse_directives(entries: Sequence[Any]) -> List[ConfigurationDirective]:
    """
    Validate every raw directive

    Raises:
        InvalidDirectiveError: On the first malformed directive
    """
    return [ConfigurationDirective.from_dict(entry) for entry in entries]


def load_directives(config_path: str) -> List[ConfigurationDirective]:
    """
    Load and validate the directive list

    Args:
        config_path: YAML or JSON file with a list of directives, a mapping
            with an 'amplify' list, or a serverless.yml with custom.amplify

    Returns:
        Validated directives in file order

    Raises:
        ConfigurationError: If the file is missing or unparseable
        InvalidDirectiveError: If any directive is malformed
    """
    logger.info(f"Loading directives: {config_path}")
    directives = parse_directives(_directive_entries(_read_document(config_path)))
    logger.info(f"Loaded {len(directives)} directives")
    return directives
