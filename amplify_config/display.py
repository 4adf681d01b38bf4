# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Display Module

Rich UI components for discovered resources and generated files.
"""

from typing import Sequence, Union

from rich.console import Console
from rich.table import Table

from .models import ConfigurationDirective, ResourceRecord, ResourceSummary, ResourceType

console = Console()

RESOURCE_STYLES = {
    ResourceType.GRAPHQL_API: "magenta",
    ResourceType.IDENTITY_POOL: "cyan",
    ResourceType.USER_POOL: "cyan",
    ResourceType.USER_POOL_CLIENT: "cyan",
    ResourceType.S3_BUCKET: "green",
    ResourceType.REST_API: "yellow",
}


def create_resources_table(
    resources: Sequence[Union[ResourceSummary, ResourceRecord]],
) -> Table:
    """
    Create table of stack resources

    Args:
        resources: Summaries or described records

    Returns:
        Rich Table object
    """
    table = Table(
        title=f"Stack Resources ({len(resources)})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Type", width=30)
    table.add_column("Logical ID", style="bold")
    table.add_column("Physical ID", overflow="fold")
    table.add_column("Stack", style="dim")

    for resource in resources:
        table.add_row(
            resource.resource_type.value,
            resource.logical_id,
            resource.physical_id,
            resource.stack_name or "",
            style=RESOURCE_STYLES.get(resource.resource_type, "dim"),
        )

    return table


def create_written_table(
    written: Sequence[str], directives: Sequence[ConfigurationDirective]
) -> Table:
    """
    Create table of generated files

    Args:
        written: Paths written, in directive order
        directives: The directives that produced them

    Returns:
        Rich Table object
    """
    table = Table(title="Generated Files", show_header=True, header_style="bold cyan")
    table.add_column("Type", style="cyan", width=15)
    table.add_column("File")

    for directive, path in zip(directives, written):
        table.add_row(directive.format.value, path)

    return table


def show_resources(resources: Sequence[Union[ResourceSummary, ResourceRecord]]) -> None:
    console.print(create_resources_table(resources))


def show_written(written: Sequence[str], directives: Sequence[ConfigurationDirective]) -> None:
    console.print(create_written_table(written, directives))
