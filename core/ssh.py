"""Remote privilege channel: forced-command SSH sessions against the gitolite user."""

from __future__ import annotations

from typing import List, Optional

from core import shell
from core.settings import GitoliteSettings
from core.shell import ShellResult
from utils.constants import SSH_FLAGS


class SshChannel:
    """Build ``ssh -T -o BatchMode=yes user@host -p port -i key ...`` vectors."""

    def __init__(
        self,
        settings: GitoliteSettings,
        *,
        ssh_bin: str = "ssh",
        timeout_seconds: Optional[float] = None,
    ):
        self.settings = settings
        self.ssh_bin = str(ssh_bin or "ssh")
        self.timeout_seconds = timeout_seconds

    def prefix(self) -> List[str]:
        return [
            *SSH_FLAGS,
            self.settings.gitolite_url,
            "-p",
            self.settings.gitolite_server_port,
            "-i",
            self.settings.gitolite_ssh_private_key,
        ]

    def build_args(self, *args: object) -> List[str]:
        return self.prefix() + [str(a) for a in args]

    def shell(self, *args: object) -> ShellResult:
        return shell.execute(self.ssh_bin, self.build_args(*args), timeout=self.timeout_seconds)

    def capture(self, *args: object) -> str:
        return shell.capture(self.ssh_bin, self.build_args(*args), timeout=self.timeout_seconds)
