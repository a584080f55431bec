"""Project actions spanning several repositories."""

import logging
import posixpath
from typing import Dict, List

from handlers.base import GitoliteHandler

logger = logging.getLogger(__name__)


class ProjectHandler(GitoliteHandler):
    name = "projects"
    actions = frozenset({"move_project_hierarchy"})

    def move_project_hierarchy(self) -> List[Dict[str, object]]:
        """Move every ``(old_path, new_path)`` pair in the subject.

        After a successful move, the old parent directory is removed when
        it was left empty.
        """
        results = []
        for old_path, new_path in list(self.subject or []):
            old_path, new_path = str(old_path), str(new_path)
            if old_path == new_path:
                continue
            logger.info("Moving repository '%s' => '%s'", old_path, new_path)
            result = self.fs.move(old_path, new_path)
            results.append(result)
            if not result["ok"]:
                continue
            old_parent = posixpath.dirname(old_path.rstrip("/"))
            if old_parent and self.fs.directory_empty(old_parent):
                self.fs.remove_directory(old_parent)
        return results
