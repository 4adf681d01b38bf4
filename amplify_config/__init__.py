# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
amplify-config - client configuration from deployed stacks

Discovers the resources of a deployed CloudFormation stack and writes
client-facing configuration files.

Example:
    >>> from amplify_config import ConfigurationPipeline, build_settings, load_directives
    >>>
    >>> settings = build_settings(stack_name="my-app-dev", region="us-east-1")
    >>> directives = load_directives("amplify.yml")
    >>> result = ConfigurationPipeline(settings).run(directives)
    >>> print(result.written)
"""

__version__ = "1.0.0"

from .config import Settings, build_settings, load_directives  # noqa: E402
from .exceptions import (  # noqa: E402
    AmplifyConfigError,
    CloudQueryError,
    CodegenError,
    ConfigurationError,
    DescribeError,
    DiscoveryError,
    InvalidDirectiveError,
    MissingResourceError,
    ResourceNotFoundError,
    SchemaError,
    TemplateError,
)
from .models import (  # noqa: E402
    ConfigurationDirective,
    OutputFormat,
    ResolvedConfiguration,
    ResourceRecord,
    ResourceSummary,
    ResourceType,
)
from .pipeline import ConfigurationPipeline, PipelineResult  # noqa: E402

__all__ = [
    # Pipeline
    "ConfigurationPipeline",
    "PipelineResult",
    "Settings",
    "build_settings",
    "load_directives",
    # Exceptions
    "AmplifyConfigError",
    "ConfigurationError",
    "CloudQueryError",
    "DiscoveryError",
    "DescribeError",
    "SchemaError",
    "TemplateError",
    "InvalidDirectiveError",
    "MissingResourceError",
    "ResourceNotFoundError",
    "CodegenError",
    # Models
    "ResourceType",
    "OutputFormat",
    "ResourceSummary",
    "ResourceRecord",
    "ConfigurationDirective",
    "ResolvedConfiguration",
]
