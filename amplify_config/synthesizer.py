# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Configuration Synthesizer Module

Renders described resources into the output format requested by a directive.
"""

import json
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .codegen import (
    AppSyncCodegenClientGenerator,
    ClientCodeGenerator,
    GraphQLOperationSynthesizer,
    OperationSynthesizer,
    TypeScriptClientGenerator,
    client_language,
    operations_language,
)
from .exceptions import InvalidDirectiveError, MissingResourceError
from .models import ConfigurationDirective, OutputFormat, ResourceRecord, ResourceType
from .renderers import render_native, render_script_module, render_typed_script_module
from .resolver import ConfigurationResolver

logger = logging.getLogger(__name__)

SCHEMA_FILENAME = "amplify-schema.json"
OPERATIONS_FILENAME = "amplify-operations.graphql"


def require_graph_api(
    records: Sequence[ResourceRecord], directive: ConfigurationDirective
) -> ResourceRecord:
    """
    The GraphQL API record a schema-based directive needs

    Raises:
        MissingResourceError: If the stack has no GraphQL API
    """
    api = next(
        (
            r
            for r in records
            if r.resource_type == ResourceType.GRAPHQL_API and r.schema_document is not None
        ),
        None,
    )
    if api is None:
        raise MissingResourceError(
            f"No GraphQL API found - cannot write {directive.filename} file"
        )
    return api


class ConfigurationSynthesizer:
    """Dispatches directives to their format handlers"""

    def __init__(
        self,
        resolver: ConfigurationResolver,
        operation_synthesizer: Optional[OperationSynthesizer] = None,
        client_generator: Optional[ClientCodeGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize synthesizer

        Args:
            resolver: Builds the per-directive resolved configuration
            operation_synthesizer: Sample operation generator (default: graphql-core based)
            client_generator: Typed client generator (default: TypeScript in
                process, Swift, Scala and Flow through aws-appsync-codegen)
            clock: Source of the generation timestamp written to script modules
        """
        self.resolver = resolver
        self.operation_synthesizer = operation_synthesizer or GraphQLOperationSynthesizer()
        self.client_generators: List[ClientCodeGenerator] = (
            [client_generator]
            if client_generator
            else [TypeScriptClientGenerator(), AppSyncCodegenClientGenerator()]
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._handlers: Dict[
            OutputFormat,
            Callable[[Sequence[ResourceRecord], ConfigurationDirective], str],
        ] = {
            OutputFormat.NATIVE: self._native,
            OutputFormat.SCRIPT_MODULE: self._script_module,
            OutputFormat.TYPED_SCRIPT_MODULE: self._typed_script_module,
            OutputFormat.SCHEMA_DOCUMENT: self._schema_document,
            OutputFormat.OPERATION_STUBS: self._operation_stubs,
            OutputFormat.CLIENT_CODE: self._client_code,
        }

    def validate(self, directive: ConfigurationDirective) -> None:
        """
        Check that a directive can be synthesized at all

        Raises:
            InvalidDirectiveError: If no handler exists for the format, or the
                client code language is not supported
        """
        if directive.format not in self._handlers:
            raise InvalidDirectiveError(
                f"Invalid Amplify configuration directive for {directive.filename}"
            )

        if directive.format == OutputFormat.CLIENT_CODE:
            language = client_language(directive.filename)
            if self._client_generator_for(language) is None:
                raise InvalidDirectiveError(
                    f"Unsupported client code language '{language}' for {directive.filename}"
                )

    def synthesize(
        self, records: Sequence[ResourceRecord], directive: ConfigurationDirective
    ) -> str:
        """
        Render one directive

        Args:
            records: Described resources
            directive: The output request

        Returns:
            The rendered file contents
        """
        self.validate(directive)
        logger.info(f"Writing {directive.format.value} file to {directive.filename}")
        return self._handlers[directive.format](records, directive)

    def _native(self, records, directive) -> str:
        return render_native(self.resolver.resolve(records, directive))

    def _script_module(self, records, directive) -> str:
        return render_script_module(self.resolver.resolve(records, directive), self.clock())

    def _typed_script_module(self, records, directive) -> str:
        return render_typed_script_module(
            self.resolver.resolve(records, directive), self.clock()
        )

    def _schema_document(self, records, directive) -> str:
        api = require_graph_api(records, directive)
        return json.dumps(api.schema_document, indent=2)

    def _operation_stubs(self, records, directive) -> str:
        api = require_graph_api(records, directive)

        with tempfile.TemporaryDirectory(prefix="amplify-config-") as work_dir:
            schema_file = self._write_schema(api, work_dir)
            output_file = Path(work_dir) / f"operations{Path(directive.filename).suffix}"
            self.operation_synthesizer.generate_operations(
                schema_file, str(output_file), operations_language(directive.filename)
            )
            return output_file.read_text(encoding="utf-8")

    def _client_code(self, records, directive) -> str:
        api = require_graph_api(records, directive)

        with tempfile.TemporaryDirectory(prefix="amplify-config-") as work_dir:
            schema_file = self._write_schema(api, work_dir)
            operations_file = str(Path(work_dir) / OPERATIONS_FILENAME)
            self.operation_synthesizer.generate_operations(
                schema_file, operations_file, "graphql"
            )

            language = client_language(directive.filename)
            output_file = Path(work_dir) / f"client{Path(directive.filename).suffix}"
            self._client_generator_for(language).generate(
                [operations_file],
                schema_file,
                str(output_file),
                language,
                {"addTypename": True},
            )
            return output_file.read_text(encoding="utf-8")

    def _client_generator_for(self, language: str) -> Optional[ClientCodeGenerator]:
        return next((g for g in self.client_generators if g.supports(language)), None)

    def _write_schema(self, api: ResourceRecord, work_dir: str) -> str:
        schema_file = Path(work_dir) / SCHEMA_FILENAME
        schema_file.write_text(json.dumps(api.schema_document, indent=2), encoding="utf-8")
        return str(schema_file)
