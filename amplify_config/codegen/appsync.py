# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
AppSync Codegen Client Generator

Generates Swift, Scala and Flow client code by running the aws-appsync-codegen
command line tool (npm install -g aws-appsync-codegen).
"""

import logging
import subprocess
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..exceptions import CodegenError

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = ("aws-appsync-codegen",)


class AppSyncCodegenClientGenerator:
    """Delegates client code generation to the aws-appsync-codegen CLI"""

    LANGUAGES = ("swift", "scala", "flow")

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
    ):
        """
        Initialize generator

        Args:
            command: Executable (and leading arguments) of the codegen tool
            runner: Process runner with the subprocess.run signature
                (default: subprocess.run)
        """
        self.command = tuple(command)
        self.runner = runner

    def supports(self, language: str) -> bool:
        return language in self.LANGUAGES

    def build_command(
        self,
        operation_files: Sequence[str],
        schema_file: str,
        output_file: str,
        target_language: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> List[str]:
        cmd = [
            *self.command,
            "generate",
            *operation_files,
            "--schema",
            schema_file,
            "--output",
            output_file,
            "--target",
            target_language,
        ]
        if (options or {}).get("addTypename", True):
            cmd.append("--add-typename")
        return cmd

    def generate(
        self,
        operation_files: Sequence[str],
        schema_file: str,
        output_file: str,
        target_language: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Run aws-appsync-codegen for a schema and its operations

        Raises:
            CodegenError: If the language is unsupported, the tool is not
                installed or it exits with an error
        """
        if not self.supports(target_language):
            raise CodegenError(f"Unsupported target language: {target_language}")

        cmd = self.build_command(
            operation_files, schema_file, output_file, target_language, options
        )
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = (self.runner or subprocess.run)(cmd, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise CodegenError(
                f"{self.command[0]} not found; install it with "
                "'npm install -g aws-appsync-codegen'"
            ) from e

        if result.returncode != 0:
            raise CodegenError(
                f"{target_language} code generation failed: {result.stderr.strip()}"
            )

        logger.info(f"Generated {target_language} client code: {output_file}")
