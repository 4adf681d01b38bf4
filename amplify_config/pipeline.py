# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Pipeline Module

Runs discovery, description and synthesis for a list of directives.

Every directive is validated before any resource is fetched, so a malformed
directive anywhere in the list means nothing is written. Directives are then
synthesized and written in order; the first failure stops processing, and
files written for earlier directives stay on disk.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, Field

from .cloud_query import Boto3CloudQuery, CloudQuery
from .codegen import ClientCodeGenerator, OperationSynthesizer
from .config import Settings
from .describer import ResourceDescriber
from .enumerator import ResourceEnumerator
from .exceptions import AmplifyConfigError
from .models import ConfigurationDirective, ResourceRecord, ResourceSummary
from .resolver import ConfigurationResolver
from .synthesizer import ConfigurationSynthesizer
from .template import CompiledTemplate, TemplateProvider
from .writer import ConfigurationWriter

logger = logging.getLogger(__name__)


class PipelineResult(BaseModel):
    """Result of a pipeline run"""

    stack_name: str = Field(description="Root CloudFormation stack name")
    resources: List[ResourceRecord] = Field(
        default_factory=list, description="Described resources"
    )
    written: List[str] = Field(default_factory=list, description="Files written, in order")


class ConfigurationPipeline:
    """Post-deployment configuration generation for one stack"""

    def __init__(
        self,
        settings: Settings,
        cloud: Optional[CloudQuery] = None,
        operation_synthesizer: Optional[OperationSynthesizer] = None,
        client_generator: Optional[ClientCodeGenerator] = None,
        clock: Optional[Callable[[], datetime]] = None,
        writer: Optional[ConfigurationWriter] = None,
    ):
        """
        Initialize pipeline

        Args:
            settings: Run settings
            cloud: Control-plane access (default: boto3 in settings.region)
            operation_synthesizer: Sample operation generator (optional)
            client_generator: Typed client generator (optional)
            clock: Current time source for generated module timestamps and
                API key expiry (optional)
            writer: File writer (default: relative to settings.output_dir)
        """
        self.settings = settings
        self.cloud = cloud or Boto3CloudQuery(region=settings.region)

        root_template = None
        if settings.template_path:
            root_template = CompiledTemplate.from_file(settings.template_path)
        self.templates = TemplateProvider(self.cloud, settings.stack_name, root_template)

        self.enumerator = ResourceEnumerator(self.cloud)
        self.describer = ResourceDescriber(self.cloud, self.templates, clock=clock)
        self.synthesizer = ConfigurationSynthesizer(
            ConfigurationResolver(
                region=settings.region,
                stage=settings.stage,
                user_agent=settings.user_agent,
                deployment_bucket_ids=settings.deployment_bucket_ids,
            ),
            operation_synthesizer=operation_synthesizer,
            client_generator=client_generator,
            clock=clock,
        )
        self.writer = writer or ConfigurationWriter(settings.output_dir)

    def enumerate(self) -> List[ResourceSummary]:
        return self.enumerator.enumerate(self.settings.stack_name)

    def discover(self) -> List[ResourceRecord]:
        """Enumerate and describe the stack resources"""
        return self.describer.describe(self.enumerate())

    def run(self, directives: Sequence[ConfigurationDirective]) -> PipelineResult:
        """
        Generate every requested file

        Args:
            directives: Validated directives, processed in order

        Returns:
            PipelineResult with the described resources and written files

        Raises:
            AmplifyConfigError: On the first failure; later directives are
                not processed
        """
        try:
            for directive in directives:
                self.synthesizer.validate(directive)

            records = self.discover()

            written = []
            for directive in directives:
                contents = self.synthesizer.synthesize(records, directive)
                written.append(str(self.writer.write(directive.filename, contents)))

        except AmplifyConfigError as e:
            logger.error(f"Cannot generate configuration: {e}")
            raise

        return PipelineResult(
            stack_name=self.settings.stack_name, resources=records, written=written
        )
