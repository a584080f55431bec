"""Local privilege channel: run commands as the gitolite service account via sudo."""

from __future__ import annotations

import logging
import posixpath
import shlex
from typing import Callable, IO, List, Optional, TypeVar

from core import shell
from core.settings import GitoliteSettings
from core.shell import ShellResult
from utils.constants import HOME_PREFIX, SUDO_FLAGS

logger = logging.getLogger(__name__)

T = TypeVar("T")


def home_path(relative_path: str) -> str:
    """Anchor ``relative_path`` at the service account's ``$HOME``.

    Leading slashes are dropped, so ``/etc`` becomes ``$HOME/etc``.
    """
    rel = str(relative_path or "").lstrip("/")
    if not rel:
        return HOME_PREFIX
    return posixpath.join(HOME_PREFIX, rel)


class SudoChannel:
    """Build ``sudo -i -n -u <user> ...`` argument vectors and run them."""

    def __init__(
        self,
        settings: GitoliteSettings,
        *,
        sudo_bin: str = "sudo",
        timeout_seconds: Optional[float] = None,
    ):
        self.settings = settings
        self.sudo_bin = str(sudo_bin or "sudo")
        self.timeout_seconds = timeout_seconds

    def prefix(self) -> List[str]:
        return [*SUDO_FLAGS, self.settings.gitolite_user]

    def build_args(self, *args: object) -> List[str]:
        return self.prefix() + [str(a) for a in args]

    def shell(self, *args: object) -> ShellResult:
        return shell.execute(self.sudo_bin, self.build_args(*args), timeout=self.timeout_seconds)

    def capture(self, *args: object) -> str:
        return shell.capture(self.sudo_bin, self.build_args(*args), timeout=self.timeout_seconds)

    def pipe(self, *args: object, consumer: Callable[[IO[str]], T]) -> Optional[T]:
        """Run a command and hand its stdout stream to ``consumer``.

        The consumer is only called when the command exits 0; otherwise the
        failure is logged and ``None`` is returned. Streams are closed on
        every path, including a consumer exception (which propagates).
        """
        argv = self.build_args(*args)
        with shell.spooled(self.sudo_bin, argv, timeout=self.timeout_seconds) as (code, out, err):
            if code != 0:
                logger.error(
                    "sudo call with '%s' returned exit %s. Error was: %s",
                    shlex.join(str(a) for a in args),
                    code,
                    err.read().strip(),
                )
                return None
            return consumer(out)

    def write(self, relative_path: str, content: str, mode: str = "600") -> None:
        """Write ``content`` to a file below the service account's home.

        ``install -m`` creates the file with ``mode`` already set and prints
        nothing, so ``content`` never shows up in logs or error output.
        Raises ``CommandFailure`` if the file cannot be written.
        """
        argv = self.build_args("install", "-m", mode, "/dev/stdin", home_path(relative_path))
        shell.capture(
            self.sudo_bin,
            argv,
            input_text=content,
            timeout=self.timeout_seconds,
            stdout_in_error=False,
        )

    def test(self, path: str, *test_flags: str) -> bool:
        """Run ``test <flags> $HOME/<path>`` as the service account.

        Never raises: an execution error counts as a failed test.
        """
        target = home_path(path)
        try:
            return self.shell("test", *test_flags, target).ok
        except Exception as e:  # noqa: BLE001
            logger.debug("File check for %s failed: %s", target, e)
            return False
