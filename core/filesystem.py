"""Path operations on the service account's side, built on the sudo channel.

All paths are relative to the service account's home directory. Test
operations return booleans and never raise. Mutations never raise either;
they log failures and report them in the returned dict so callers can
check ``result["ok"]`` when correctness matters.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Dict

from core.errors import CommandFailure
from core.sudo import SudoChannel, home_path

logger = logging.getLogger(__name__)


class GitoliteFilesystem:
    def __init__(self, sudo: SudoChannel):
        self.sudo = sudo

    def test(self, path: str, *test_flags: str) -> bool:
        return self.sudo.test(path, *test_flags)

    def file_exists(self, path: str) -> bool:
        """True if ``path`` exists and is readable to the service account."""
        return self.sudo.test(path, "-r")

    def directory_exists(self, path: str) -> bool:
        return self.sudo.test(path, "-d")

    def directory_empty(self, path: str) -> bool:
        target = home_path(path)
        try:
            out, _err, code = self.sudo.shell("find", target, "-prune", "-empty", "-type", "d")
        except Exception as e:  # noqa: BLE001
            logger.debug("Empty directory check for %s failed: %s", target, e)
            return False
        return code == 0 and str(path) in out

    def mkdir(self, *args: str) -> Dict[str, object]:
        """Run ``mkdir`` with ``args`` as the service account, e.g. ``mkdir("-p", path)``."""
        try:
            self.sudo.capture("mkdir", *args)
        except CommandFailure as e:
            logger.error("Couldn't create directory %s. Reason: %s", " ".join(args), e)
            return {"ok": False, "reason": "mkdir_failed", "error": str(e)}
        return {"ok": True, "args": list(args)}

    def move(self, old_path: str, new_path: str) -> Dict[str, object]:
        """Move ``old_path`` to ``new_path``, creating the target's parent first.

        Not atomic: a failure after the ``mkdir`` leaves the new parent
        directory behind.
        """
        source = home_path(old_path)
        target = home_path(new_path)
        parent = posixpath.dirname(target.rstrip("/"))
        if parent:
            created = self.mkdir("-p", parent)
            if not created["ok"]:
                logger.error("Couldn't move '%s' => '%s'. Reason: %s", old_path, new_path, created["error"])
                return {"ok": False, "reason": "move_failed", "error": created["error"]}
        try:
            self.sudo.capture("mv", source, target)
        except CommandFailure as e:
            logger.error("Couldn't move '%s' => '%s'. Reason: %s", old_path, new_path, e)
            return {"ok": False, "reason": "move_failed", "error": str(e)}
        return {"ok": True, "old_path": old_path, "new_path": new_path}

    def remove_directory(self, relative_path: str, force: bool = False) -> Dict[str, object]:
        """Remove a directory below the service account's home.

        ``force`` deletes recursively (``rm -rf``); otherwise ``rmdir`` is
        used, which refuses non-empty directories.
        """
        target = home_path(relative_path)
        logger.debug("Deleting '%s' [forced=%s] with git user", target, "yes" if force else "no")
        try:
            if force:
                self.sudo.capture("rm", "-rf", target)
            else:
                self.sudo.capture("rmdir", target)
        except CommandFailure as e:
            logger.error("Could not delete '%s' from disk: %s", relative_path, e)
            return {"ok": False, "reason": "remove_failed", "error": str(e)}
        return {"ok": True, "path": relative_path, "forced": bool(force)}
