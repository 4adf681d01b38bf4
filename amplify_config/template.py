# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Compiled Template Module

Read-only access to compiled CloudFormation templates. The describer only
uses them to find the user pool an app client declares as its parent.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .cloud_query import CloudQuery
from .exceptions import CloudQueryError, TemplateError

logger = logging.getLogger(__name__)


class CloudFormationLoader(yaml.SafeLoader):
    """YAML loader that understands CloudFormation short-form intrinsic tags"""

    pass


def _intrinsic_constructor(loader, tag_suffix, node):
    name = "Ref" if tag_suffix == "Ref" else f"Fn::{tag_suffix}"

    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        if tag_suffix == "GetAtt":
            value = value.split(".", 1)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)

    return {name: value}


CloudFormationLoader.add_multi_constructor("!", _intrinsic_constructor)


class CompiledTemplate:
    """Mapping from logical resource id to its declaration"""

    def __init__(self, template: Dict[str, Any]):
        resources = template.get("Resources") if isinstance(template, dict) else None
        if not isinstance(resources, dict):
            raise TemplateError("Template has no Resources section")
        self.resources: Dict[str, Any] = resources

    @classmethod
    def from_text(cls, text: str) -> "CompiledTemplate":
        """Parse a JSON or YAML template body"""
        try:
            return cls(json.loads(text))
        except json.JSONDecodeError:
            pass

        try:
            return cls(yaml.load(text, Loader=CloudFormationLoader))
        except yaml.YAMLError as e:
            raise TemplateError(f"Template is neither JSON nor YAML: {e}") from e

    @classmethod
    def from_file(cls, template_path: str) -> "CompiledTemplate":
        """Load a compiled template from disk"""
        path = Path(template_path)
        if not path.exists():
            raise TemplateError(f"Template not found: {template_path}")

        logger.info(f"Loading compiled template: {template_path}")
        return cls.from_text(path.read_text(encoding="utf-8"))

    def get_property(self, logical_id: str, name: str) -> Any:
        """
        Get a declared property of a resource

        Returns:
            The property value, or None if the resource or property is missing
        """
        resource = self.resources.get(logical_id) or {}
        return (resource.get("Properties") or {}).get(name)


class TemplateProvider:
    """
    Compiled templates by stack name

    The root stack template can be supplied up front (e.g. the framework's
    compiled template file). Any other stack's processed template is fetched
    from CloudFormation on first use and cached.
    """

    def __init__(
        self,
        cloud: CloudQuery,
        root_stack_name: Optional[str] = None,
        root_template: Optional[CompiledTemplate] = None,
    ):
        self.cloud = cloud
        self._cache: Dict[str, CompiledTemplate] = {}
        if root_stack_name and root_template is not None:
            self._cache[root_stack_name] = root_template

    def for_stack(self, stack_name: str) -> CompiledTemplate:
        if stack_name not in self._cache:
            self._cache[stack_name] = self._fetch(stack_name)
        return self._cache[stack_name]

    def _fetch(self, stack_name: str) -> CompiledTemplate:
        logger.info(f"Fetching processed template for stack: {stack_name}")
        try:
            result = self.cloud.describe(
                "cloudformation",
                "get_template",
                {"StackName": stack_name, "TemplateStage": "Processed"},
            )
        except CloudQueryError as e:
            raise TemplateError(
                f"Cannot fetch template for stack '{stack_name}': {e}"
            ) from e

        # boto3 already decodes JSON template bodies into a dict
        body = result.get("TemplateBody")
        if isinstance(body, dict):
            return CompiledTemplate(body)
        return CompiledTemplate.from_text(body or "")
