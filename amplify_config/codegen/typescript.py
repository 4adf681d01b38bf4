# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
TypeScript Client Code Generator

Generates TypeScript type declarations (API.ts) for the enums and input
types of a schema and for the variables and results of every operation in a
set of operation documents.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from graphql import (
    FieldNode,
    GraphQLError,
    GraphQLSchema,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
    is_enum_type,
    is_input_object_type,
    is_leaf_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    parse,
    type_from_ast,
)

from ..exceptions import CodegenError
from .operations import load_schema

logger = logging.getLogger(__name__)

# Output file extension -> client code language
CLIENT_LANGUAGES = {
    ".ts": "typescript",
    ".swift": "swift",
    ".scala": "scala",
    ".js": "flow",
}

SCALAR_TYPES = {
    "ID": "string",
    "String": "string",
    "Int": "number",
    "Float": "number",
    "Boolean": "boolean",
    "AWSDate": "string",
    "AWSTime": "string",
    "AWSDateTime": "string",
    "AWSTimestamp": "number",
    "AWSEmail": "string",
    "AWSJSON": "string",
    "AWSURL": "string",
    "AWSPhone": "string",
    "AWSIPAddress": "string",
}

HEADER = """/* tslint:disable */
/* eslint-disable */
//  This file was automatically generated and should not be edited.
"""


class ClientCodeGenerator(Protocol):
    """Writes typed client code for a schema and its operations"""

    def supports(self, language: str) -> bool: ...

    def generate(
        self,
        operation_files: Sequence[str],
        schema_file: str,
        output_file: str,
        target_language: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> None: ...


def client_language(filename: str) -> str:
    """Client code language implied by an output file name"""
    suffix = Path(filename).suffix.lower()
    return CLIENT_LANGUAGES.get(suffix, suffix.lstrip("."))


class TypeScriptClientGenerator:
    """Generates API.ts style type declarations"""

    LANGUAGES = ("typescript",)

    def __init__(self):
        self.add_typename = True
        self._schema: Optional[GraphQLSchema] = None

    def supports(self, language: str) -> bool:
        return language in self.LANGUAGES

    def generate(
        self,
        operation_files: Sequence[str],
        schema_file: str,
        output_file: str,
        target_language: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Write TypeScript types for a schema and its operations

        Args:
            operation_files: GraphQL operation documents
            schema_file: Introspection schema JSON file
            output_file: Destination file
            target_language: Must be 'typescript'
            options: {'addTypename': bool}, defaults to adding __typename

        Raises:
            CodegenError: If the language is unsupported or the operations
                do not match the schema
        """
        if not self.supports(target_language):
            raise CodegenError(f"Unsupported target language: {target_language}")

        self.add_typename = (options or {}).get("addTypename", True)
        schema = load_schema(schema_file)
        self._schema = schema

        source = "\n".join(Path(f).read_text(encoding="utf-8") for f in operation_files)
        try:
            document = parse(source)
        except GraphQLError as e:
            raise CodegenError(f"Cannot parse operations: {e.message}") from e

        blocks = [HEADER]
        blocks.extend(self._schema_types(schema))
        for definition in document.definitions:
            if isinstance(definition, OperationDefinitionNode):
                blocks.extend(self._operation_types(schema, definition))

        Path(output_file).write_text("\n".join(blocks), encoding="utf-8")
        logger.debug(f"Wrote TypeScript client types to {output_file}")

    def _schema_types(self, schema: GraphQLSchema) -> List[str]:
        blocks = []
        for name in sorted(schema.type_map):
            if name.startswith("__"):
                continue
            graphql_type = schema.type_map[name]

            if is_enum_type(graphql_type):
                values = "\n".join(f'  {value} = "{value}",' for value in graphql_type.values)
                blocks.append(f"export enum {name} {{\n{values}\n}}\n")
            elif is_input_object_type(graphql_type):
                members = []
                for field_name, field in graphql_type.fields.items():
                    optional = "" if is_non_null_type(field.type) else "?"
                    members.append(f"  {field_name}{optional}: {self._input_ref(field.type)},")
                blocks.append(f"export type {name} = {{\n" + "\n".join(members) + "\n};\n")

        return blocks

    def _input_ref(self, graphql_type) -> str:
        if is_non_null_type(graphql_type):
            return self._input_base(graphql_type.of_type)
        return f"{self._input_base(graphql_type)} | null"

    def _input_base(self, graphql_type) -> str:
        if is_list_type(graphql_type):
            return f"Array<{self._input_ref(graphql_type.of_type)}>"
        if is_enum_type(graphql_type) or is_input_object_type(graphql_type):
            return graphql_type.name
        return SCALAR_TYPES.get(graphql_type.name, "any")

    def _operation_types(
        self, schema: GraphQLSchema, operation: OperationDefinitionNode
    ) -> List[str]:
        if operation.name is None:
            raise CodegenError("Anonymous operations are not supported")

        kind = operation.operation.value
        type_name = operation.name.value + kind.capitalize()
        root = getattr(schema, f"{kind}_type")
        if root is None:
            raise CodegenError(f"Schema does not define a {kind} type")

        members = []
        for variable in operation.variable_definitions or ():
            variable_type = type_from_ast(schema, variable.type)
            if variable_type is None:
                raise CodegenError(
                    f"Unknown type for variable ${variable.variable.name.value} in {operation.name.value}"
                )
            optional = "" if is_non_null_type(variable_type) else "?"
            members.append(
                f"  {variable.variable.name.value}{optional}: {self._input_ref(variable_type)},"
            )

        variables = f"export type {type_name}Variables = {{\n" + "\n".join(members) + "\n};\n"
        result = f"export type {type_name} = {self._object_type(root, operation.selection_set, 0, typename=False)};\n"
        return [variables, result]

    def _object_type(
        self,
        parent,
        selection_set: Optional[SelectionSetNode],
        indent: int,
        typename: bool = True,
    ) -> str:
        if selection_set is None:
            raise CodegenError(f"Selection set required for {parent.name}")

        pad = "  " * (indent + 1)
        members = []
        fragments = []
        has_typename = False

        for selection in selection_set.selections:
            if isinstance(selection, InlineFragmentNode):
                fragments.append(selection)
                continue
            if not isinstance(selection, FieldNode):
                raise CodegenError("Fragment spreads are not supported")

            field_name = selection.name.value
            key = selection.alias.value if selection.alias else field_name

            if field_name == "__typename":
                has_typename = True
                members.append(f"{pad}{key}: {self._typename(parent)},")
                continue

            field = parent.fields.get(field_name)
            if field is None:
                raise CodegenError(f"Unknown field {parent.name}.{field_name}")
            members.append(f"{pad}{key}: {self._output_ref(field.type, selection, indent + 1)},")

        if typename and self.add_typename and not has_typename:
            members.insert(0, f"{pad}__typename: {self._typename(parent)},")

        body = "{\n" + "\n".join(members) + "\n" + "  " * indent + "}"
        if not fragments:
            return body

        variants = []
        for fragment in fragments:
            fragment_type = parent
            if fragment.type_condition is not None:
                fragment_type = self._schema.get_type(fragment.type_condition.name.value)
            variants.append(
                self._object_type(fragment_type, fragment.selection_set, indent, typename=False)
            )
        return f"{body} & ({' | '.join(variants)})"

    def _typename(self, parent) -> str:
        return f'"{parent.name}"' if is_object_type(parent) else "string"

    def _output_ref(self, graphql_type, node: FieldNode, indent: int) -> str:
        if is_non_null_type(graphql_type):
            return self._output_base(graphql_type.of_type, node, indent)
        return f"{self._output_base(graphql_type, node, indent)} | null"

    def _output_base(self, graphql_type, node: FieldNode, indent: int) -> str:
        if is_list_type(graphql_type):
            return f"Array<{self._output_ref(graphql_type.of_type, node, indent)}>"
        if is_enum_type(graphql_type):
            return graphql_type.name
        if is_leaf_type(graphql_type):
            return SCALAR_TYPES.get(graphql_type.name, "any")
        return self._object_type(graphql_type, node.selection_set, indent)
