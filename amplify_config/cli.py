# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Amplify Config CLI - Main Command Line Interface

Run after a stack deployment to write client configuration files that match
the deployed resources.
"""

import json
import logging
import sys
from typing import Optional, Tuple

import click
from rich.console import Console

from . import __version__, display
from .config import build_settings, load_directives
from .exceptions import AmplifyConfigError
from .pipeline import ConfigurationPipeline

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
for noisy in ("botocore", "boto3", "urllib3"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

console = Console()


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    amplify-config - Client configuration from deployed stacks

    This tool provides commands for:
    - Generating awsconfiguration.json, aws-exports.js/ts and GraphQL files
    - Listing the resources of a stack and its nested stacks
    """
    pass


@cli.command()
@click.option("--stack-name", help="CloudFormation stack name")
@click.option("--service", help="Service name; stack name defaults to <service>-<stage>")
@click.option("--stage", help="Deployment stage (default: AMPLIFY_CONFIG_STAGE or dev)")
@click.option("--region", help="AWS region (optional)")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Directive file (YAML or JSON, or serverless.yml with custom.amplify)",
)
@click.option(
    "--template",
    "template_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Compiled CloudFormation template of the root stack (optional)",
)
@click.option(
    "--deployment-bucket",
    "deployment_buckets",
    multiple=True,
    help="Extra deployment bucket logical id to ignore, besides ServerlessDeploymentBucket (repeatable)",
)
@click.option(
    "--output-dir",
    default=".",
    type=click.Path(file_okay=False),
    help="Base directory for relative output file names (default: .)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def generate(
    stack_name: Optional[str],
    service: Optional[str],
    stage: Optional[str],
    region: Optional[str],
    config_path: str,
    template_path: Optional[str],
    deployment_buckets: Tuple[str, ...],
    output_dir: str,
    verbose: bool,
):
    """
    Generate client configuration files for a deployed stack

    Examples:

      # Use directives from a standalone file
      amplify-config generate --stack-name my-app-dev --config amplify.yml

      # Serverless Framework project, after `sls deploy --stage prod`
      amplify-config generate --service my-app --stage prod \\
          --config serverless.yml \\
          --template .serverless/cloudformation-template-update-stack.json
    """
    if verbose:
        logging.getLogger("amplify_config").setLevel(logging.DEBUG)

    try:
        settings = build_settings(
            stack_name=stack_name,
            service=service,
            stage=stage,
            region=region,
            template_path=template_path,
            deployment_bucket_ids=deployment_buckets,
            output_dir=output_dir,
        )
        directives = load_directives(config_path)

        console.print(
            f"[bold blue]Generating configuration for stack: {settings.stack_name}[/bold blue]"
        )
        console.print(f"Region: {settings.region}")
        console.print()

        pipeline = ConfigurationPipeline(settings)
        with console.status("[bold green]Discovering resources..."):
            result = pipeline.run(directives)

        display.show_written(result.written, directives)
        console.print(
            f"\n[green]✓ Wrote {len(result.written)} configuration file(s) from "
            f"{len(result.resources)} resources[/green]"
        )

    except AmplifyConfigError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error generating configuration: {e}", exc_info=True)
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.option("--stack-name", help="CloudFormation stack name")
@click.option("--service", help="Service name; stack name defaults to <service>-<stage>")
@click.option("--stage", help="Deployment stage (default: AMPLIFY_CONFIG_STAGE or dev)")
@click.option("--region", help="AWS region (optional)")
@click.option("--json", "as_json", is_flag=True, help="Print resources as JSON")
def resources(
    stack_name: Optional[str],
    service: Optional[str],
    stage: Optional[str],
    region: Optional[str],
    as_json: bool,
):
    """
    List the resources of a stack, including nested stacks

    Examples:

      amplify-config resources --stack-name my-app-dev
      amplify-config resources --service my-app --stage prod --json
    """
    try:
        settings = build_settings(
            stack_name=stack_name, service=service, stage=stage, region=region
        )
        summaries = ConfigurationPipeline(settings).enumerate()

        if as_json:
            click.echo(
                json.dumps([s.model_dump(mode="json") for s in summaries], indent=2)
            )
        else:
            display.show_resources(summaries)

    except AmplifyConfigError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error listing resources: {e}", exc_info=True)
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
