"""Error types raised by the gitolite execution layer."""

from __future__ import annotations

import shlex
from typing import List, Optional, Sequence


class GitHostingError(Exception):
    """Base class for every error this package raises on purpose."""


class CommandFailure(GitHostingError):
    """A privileged or remote command exited non-zero (or could not run)."""

    def __init__(self, command: Sequence[str], output: str, returncode: Optional[int] = None):
        self.command: List[str] = [str(part) for part in command]
        self.output = str(output or "")
        self.returncode = returncode
        detail = self.output.strip()
        message = f"Command {shlex.join(self.command)!r} failed"
        if returncode is not None:
            message += f" with exit code {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class DispatchError(GitHostingError):
    """No registered handler implements the requested action."""

    def __init__(self, action: str):
        self.action = str(action)
        super().__init__(f"No available handler for action '{self.action}' found.")


class ConfigurationError(GitHostingError):
    """A required setting is missing or unusable."""

    def __init__(self, key: str, message: Optional[str] = None):
        self.key = str(key)
        super().__init__(message or f"Required setting '{self.key}' is not configured")
