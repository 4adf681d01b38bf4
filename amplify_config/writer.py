# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Writes generated configuration files.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ConfigurationWriter:
    """Writes rendered files relative to a base directory"""

    def __init__(self, base_dir: str = "."):
        self.base_dir = Path(base_dir)

    def write(self, filename: str, contents: str) -> Path:
        """
        Write a file, creating intermediary directories

        Args:
            filename: Output path, relative to the base directory unless absolute
            contents: File contents

        Returns:
            The path written
        """
        path = self.base_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(contents, encoding="utf-8")

        logger.info(f"Wrote {path}")
        return path
