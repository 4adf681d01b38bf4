# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Resource Enumerator Module

Walks a CloudFormation stack, and every nested stack it contains, into a flat
list of resource summaries.
"""

import logging
from typing import List, Optional, Set

from .cloud_query import CloudQuery
from .exceptions import CloudQueryError, DiscoveryError
from .models import ResourceSummary, ResourceType

logger = logging.getLogger(__name__)


def nested_stack_name(physical_id: str) -> str:
    """
    Extract the stack name from a nested stack physical id

    Nested stacks are reported with their stack ARN, e.g.
    arn:aws:cloudformation:us-east-1:123456789012:stack/my-stack-Api-1AB2/guid

    Args:
        physical_id: Physical resource id of an AWS::CloudFormation::Stack

    Returns:
        The nested stack name, or the physical id unchanged if it is not an ARN
    """
    if physical_id.startswith("arn:") and ":stack/" in physical_id:
        return physical_id.split("/")[1]
    return physical_id


class ResourceEnumerator:
    """Lists all resources of a stack tree, following pagination and nesting"""

    def __init__(self, cloud: CloudQuery):
        self.cloud = cloud

    def enumerate(self, stack_name: str) -> List[ResourceSummary]:
        """
        Enumerate the resources of a stack and its nested stacks

        Args:
            stack_name: Name of the root CloudFormation stack

        Returns:
            Flat list of resource summaries in enumeration order, without
            duplicates and without the nested stack resources themselves

        Raises:
            DiscoveryError: If any stack in the tree cannot be listed
        """
        logger.info(f"Discovering resources for stack: {stack_name}")

        resources: List[ResourceSummary] = []
        self._walk(stack_name, resources, seen=set(), visited=set())

        logger.info(f"Discovered {len(resources)} resources")
        return resources

    def _walk(
        self,
        stack_name: str,
        resources: List[ResourceSummary],
        seen: Set[tuple],
        visited: Set[str],
    ) -> None:
        visited.add(stack_name)

        for item in self._list_stack(stack_name):
            physical_id = item.get("PhysicalResourceId")
            if not physical_id:
                logger.debug(
                    f"Skipping {item.get('LogicalResourceId')}: no physical resource id"
                )
                continue

            summary = ResourceSummary(
                resource_type=ResourceType.from_cfn(item.get("ResourceType", "")),
                logical_id=item.get("LogicalResourceId", ""),
                physical_id=physical_id,
                stack_name=stack_name,
            )

            if summary.resource_type == ResourceType.NESTED_STACK:
                nested_name = nested_stack_name(physical_id)
                if nested_name in visited:
                    continue
                logger.debug(f"Expanding nested stack {summary.logical_id}: {nested_name}")
                self._walk(nested_name, resources, seen, visited)
                continue

            if summary.key in seen:
                logger.debug(f"Skipping duplicate resource {summary.physical_id}")
                continue

            seen.add(summary.key)
            resources.append(summary)

    def _list_stack(self, stack_name: str) -> List[dict]:
        """Collect every page of a single stack's resource listing"""
        items = []
        next_token: Optional[str] = None

        while True:
            try:
                page = self.cloud.list_resources(stack_name, next_token)
            except CloudQueryError as e:
                logger.error(f"Error listing resources for {stack_name}: {e}")
                raise DiscoveryError(stack_name, str(e)) from e

            items.extend(page.items)
            next_token = page.next_token
            if not next_token:
                break

        return items
