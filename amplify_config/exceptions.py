# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Amplify Config Exceptions

Custom exception classes for resource discovery and configuration synthesis.
None of these are retried; each one aborts the pipeline.
"""

from typing import Optional


class AmplifyConfigError(Exception):
    """Base exception for all amplify-config errors."""

    pass


class ConfigurationError(AmplifyConfigError):
    """
    Raised when the tool is misconfigured.

    Examples:
        - Neither stack name nor service name provided
        - Region could not be determined
        - Directive file missing or unreadable
    """

    pass


class CloudQueryError(AmplifyConfigError):
    """
    Raised when a control-plane request fails at the transport level.

    Examples:
        - Access denied
        - Throttling
        - Stack does not exist
    """

    def __init__(self, service: str, operation: str, message: str):
        super().__init__(f"{service}.{operation} failed: {message}")
        self.service = service
        self.operation = operation


class DiscoveryError(AmplifyConfigError):
    """Raised when the resources of a stack cannot be listed."""

    def __init__(self, stack_name: str, message: str):
        super().__init__(f"Cannot list resources of stack '{stack_name}': {message}")
        self.stack_name = stack_name


class DescribeError(AmplifyConfigError):
    """Raised when the metadata lookup for a specific resource fails."""

    def __init__(self, logical_id: str, message: str):
        super().__init__(f"Cannot describe resource '{logical_id}': {message}")
        self.logical_id = logical_id


class SchemaError(AmplifyConfigError):
    """Raised when a GraphQL API returns an introspection schema that is not JSON."""

    def __init__(self, logical_id: str, message: str):
        super().__init__(f"Invalid introspection schema for '{logical_id}': {message}")
        self.logical_id = logical_id


class TemplateError(AmplifyConfigError):
    """
    Raised when the compiled infrastructure template is unavailable.

    Examples:
        - Template file not found
        - Template file is not valid JSON or YAML
        - Template has no Resources section
    """

    pass


class InvalidDirectiveError(AmplifyConfigError):
    """
    Raised when a configuration directive is malformed.

    Examples:
        - Missing 'filename' or 'type'
        - Unknown 'type'
        - Output extension names an unsupported code generation language
    """

    def __init__(self, message: str, directive: Optional[dict] = None):
        super().__init__(message)
        self.directive = directive


class MissingResourceError(AmplifyConfigError):
    """Raised when a directive needs a resource type that the stack does not contain."""

    pass


class ResourceNotFoundError(AmplifyConfigError):
    """Raised when a directive names a resource that does not exist or cannot be used."""

    def __init__(self, filename: str, message: str):
        super().__init__(f"{filename}: {message}")
        self.filename = filename


class CodegenError(AmplifyConfigError):
    """Raised when GraphQL operation or client code generation fails."""

    pass
