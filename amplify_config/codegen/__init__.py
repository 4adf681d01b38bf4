# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
GraphQL code generation: sample operations and typed client code.
"""

from .appsync import AppSyncCodegenClientGenerator
from .operations import (
    GraphQLOperationSynthesizer,
    OperationSynthesizer,
    load_schema,
    operations_language,
)
from .typescript import ClientCodeGenerator, TypeScriptClientGenerator, client_language

__all__ = [
    "OperationSynthesizer",
    "GraphQLOperationSynthesizer",
    "ClientCodeGenerator",
    "TypeScriptClientGenerator",
    "AppSyncCodegenClientGenerator",
    "client_language",
    "load_schema",
    "operations_language",
]
