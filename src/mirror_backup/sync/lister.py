"""Directory listing shared by the sync and removal traversals."""

import logging
import os
from pathlib import Path
from typing import Set, Union

from ..errors import FilesystemError

logger = logging.getLogger(__name__)


class DirectoryLister:
    """Lists the immediate child names of a directory."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def list_children(self, directory: Union[str, Path]) -> Set[str]:
        """Return the child base names of ``directory``.

        A directory that does not exist yet is empty during a dry run,
        since the run only planned to create it.
        """
        directory = Path(directory)
        if self.dry_run and not directory.exists():
            logger.debug(f"{directory} does not exist yet (dry-run), treating as empty")
            return set()

        try:
            # os.listdir never yields '.' or '..'
            return set(os.listdir(directory))
        except OSError as e:
            raise FilesystemError(f"Failed to read directory ({directory}): {e}") from e
