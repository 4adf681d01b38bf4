# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Operation Synthesizer Module

Generates sample queries, mutations and subscriptions for every root field of
an introspected GraphQL schema.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, NamedTuple, Protocol

from graphql import (
    GraphQLArgument,
    GraphQLSchema,
    build_client_schema,
    get_named_type,
    is_leaf_type,
    is_non_null_type,
    is_union_type,
)
from graphql.pyutils import Undefined

from ..exceptions import CodegenError

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 2

ROOT_OPERATIONS = (
    ("query", "query_type"),
    ("mutation", "mutation_type"),
    ("subscription", "subscription_type"),
)

# Output file extension -> operations language
OPERATION_LANGUAGES = {
    ".graphql": "graphql",
    ".gql": "graphql",
    ".js": "javascript",
    ".ts": "typescript",
}

GENERATED_HEADER = "// this is an auto generated file. This will be overwritten"


class GeneratedOperation(NamedTuple):
    kind: str
    field_name: str
    text: str


class OperationSynthesizer(Protocol):
    """Writes a sample operations document for a schema file"""

    def generate_operations(
        self, schema_file: str, output_file: str, language: str = "graphql"
    ) -> None: ...


def operations_language(filename: str) -> str:
    """Operations language implied by an output file name (default: graphql)"""
    return OPERATION_LANGUAGES.get(Path(filename).suffix.lower(), "graphql")


def load_schema(schema_file: str) -> GraphQLSchema:
    """
    Build a client schema from an introspection JSON file

    Accepts both the raw introspection result and one wrapped in 'data'.

    Raises:
        CodegenError: If the file is not a usable introspection result
    """
    try:
        document = json.loads(Path(schema_file).read_text(encoding="utf-8"))
        introspection = document.get("data", document)
        return build_client_schema(introspection)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        raise CodegenError(f"Cannot load GraphQL schema {schema_file}: {e}") from e


def _is_required(argument: GraphQLArgument) -> bool:
    return is_non_null_type(argument.type) and argument.default_value is Undefined


class GraphQLOperationSynthesizer:
    """Sample operation generator, following fields up to a maximum depth"""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def generate_operations(
        self, schema_file: str, output_file: str, language: str = "graphql"
    ) -> None:
        """
        Write sample operations for every root field

        Args:
            schema_file: Introspection schema JSON file
            output_file: Destination file
            language: 'graphql', 'javascript' or 'typescript'
        """
        schema = load_schema(schema_file)
        operations = self.build_operations(schema)
        logger.debug(f"Generated {len(operations)} operations from {schema_file}")

        Path(output_file).write_text(
            render_operations(operations, language), encoding="utf-8"
        )

    def build_operations(self, schema: GraphQLSchema) -> List[GeneratedOperation]:
        operations = []
        for kind, attribute in ROOT_OPERATIONS:
            root = getattr(schema, attribute)
            if root is None:
                continue
            for field_name, field in root.fields.items():
                operations.append(self._build_operation(kind, field_name, field))
        return operations

    def _build_operation(self, kind: str, field_name: str, field) -> GeneratedOperation:
        name = field_name[0].upper() + field_name[1:]
        arguments = list(field.args.items())

        header = f"{kind} {name}"
        call = field_name
        if arguments:
            variables = ", ".join(f"${arg}: {definition.type}" for arg, definition in arguments)
            header += f"({variables})"
            call += "(" + ", ".join(f"{arg}: ${arg}" for arg, _ in arguments) + ")"

        selection = self._selection(field.type, depth=1, indent=2)
        if selection:
            call += f" {selection}"

        text = f"{header} {{\n  {call}\n}}"
        return GeneratedOperation(kind=kind, field_name=field_name, text=text)

    def _selection(self, output_type, depth: int, indent: int) -> str:
        named = get_named_type(output_type)
        if is_leaf_type(named):
            return ""

        pad = "  " * indent
        lines = [f"{pad}__typename"]

        if is_union_type(named):
            for possible in named.types:
                members = self._fields(possible, depth, indent + 1)
                if members:
                    lines.append(f"{pad}... on {possible.name} {{")
                    lines.extend(members)
                    lines.append(f"{pad}}}")
        else:
            lines.extend(self._fields(named, depth, indent))

        return "{\n" + "\n".join(lines) + "\n" + "  " * (indent - 1) + "}"

    def _fields(self, named, depth: int, indent: int) -> List[str]:
        pad = "  " * indent
        lines = []

        for name, field in named.fields.items():
            # Nested fields cannot be given variables
            if any(_is_required(arg) for arg in field.args.values()):
                continue

            if is_leaf_type(get_named_type(field.type)):
                lines.append(f"{pad}{name}")
            elif depth < self.max_depth:
                lines.append(f"{pad}{name} {self._selection(field.type, depth + 1, indent + 1)}")

        return lines


def render_operations(operations: List[GeneratedOperation], language: str) -> str:
    """Render generated operations as a GraphQL document or as JS/TS exports"""
    if language == "graphql":
        return "\n\n".join(op.text for op in operations) + "\n"

    if language not in ("javascript", "typescript"):
        raise CodegenError(f"Unsupported operations language: {language}")

    blocks: List[str] = []
    if language == "typescript":
        blocks.append("/* tslint:disable */\n/* eslint-disable */")
    blocks.append(GENERATED_HEADER)

    names: Dict[str, int] = {}
    for op in operations:
        const_name = op.field_name
        if const_name in names:
            names[const_name] += 1
            const_name = f"{const_name}{op.kind.capitalize()}"
        else:
            names[const_name] = 1
        blocks.append(f"export const {const_name} = /* GraphQL */ `\n{op.text}\n`;")

    return "\n\n".join(blocks) + "\n"
