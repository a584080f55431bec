"""Repository actions that only touch the repositories on disk."""

import logging
import posixpath
from typing import Dict, List

from handlers.base import GitoliteHandler

logger = logging.getLogger(__name__)


class RepositoryHandler(GitoliteHandler):
    name = "repositories"
    actions = frozenset({"move_repository", "delete_repositories"})

    def move_repository(self) -> Dict[str, object]:
        old_path = str(self.subject)
        new_path = str(self.options.get("new_path") or "").strip()
        if not new_path:
            return {"ok": False, "reason": "new_path_required"}
        if self.fs.file_exists(new_path):
            logger.warning("Not moving '%s': target '%s' already exists", old_path, new_path)
            return {"ok": False, "reason": "target_exists", "new_path": new_path}
        return self.fs.move(old_path, new_path)

    def delete_repositories(self) -> List[Dict[str, object]]:
        """Delete each repository path in the subject.

        With ``prune_parents`` set, parent directories left empty are
        removed too (never forced).
        """
        force = bool(self.options.get("force", False))
        prune = bool(self.options.get("prune_parents", False))
        paths = [self.subject] if isinstance(self.subject, str) else list(self.subject or [])
        results = []
        for raw in paths:
            path = str(raw)
            result = self.fs.remove_directory(path, force=force)
            results.append(result)
            if prune and result["ok"]:
                self._prune_empty_parents(path)
        return results

    def _prune_empty_parents(self, path: str) -> None:
        parent = posixpath.dirname(path.rstrip("/"))
        while parent and self.fs.directory_empty(parent):
            if not self.fs.remove_directory(parent)["ok"]:
                break
            parent = posixpath.dirname(parent)
