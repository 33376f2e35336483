"""
Archive store.

Writes finalized conversations to disk as pretty-printed JSON, one file
per conversation, named after the permalink.
"""

import json
import logging
from pathlib import Path

from slack_archiver.integrations.slack.models import ComponentsAggregate

logger = logging.getLogger(__name__)


class ArchiveStore:
    """Directory of archived conversations."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, file_name: str) -> Path:
        return self.directory / file_name

    def save(self, components: ComponentsAggregate) -> Path:
        """Write ``components`` and return the file path. Overwrites an existing archive."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(components.file_name)

        data = components.model_dump(mode="json", exclude_none=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

        logger.info(f"Saved conversation archive to {path}")
        return path

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).exists()
