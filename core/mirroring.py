"""Install the SSH keys gitolite uses to push to mirrors.

Installation is all-or-nothing per attempt: any failure leaves the
installer in the not-installed state and the next call starts over.
"""

from __future__ import annotations

import logging
import re
import threading
from pathlib import Path
from typing import Optional

from core.errors import CommandFailure, ConfigurationError
from core.settings import GitoliteSettings
from core.sudo import SudoChannel, home_path
from utils.constants import (
    MIRRORING_PRIVATE_KEY_PATH,
    MIRRORING_PUBLIC_KEY_PATH,
    MIRRORING_SCRIPT_PATH,
    SSH_DIR,
)

logger = logging.getLogger(__name__)

_KEY_FIELD_SPLIT_RE = re.compile(r"[\t ]+")


def build_mirroring_script(home_dir: str) -> str:
    """Wrapper gitolite runs instead of plain ``ssh`` when pushing to mirrors."""
    key_path = f"{home_dir.rstrip('/')}/{MIRRORING_PRIVATE_KEY_PATH}"
    return "\n".join(
        [
            "#!/bin/sh",
            f'exec ssh -T -o BatchMode=yes -o StrictHostKeyChecking=no -i {key_path} "$@"',
            "",
        ]
    )


class MirroringKeyInstaller:
    def __init__(self, settings: GitoliteSettings, sudo: SudoChannel):
        self.settings = settings
        self.sudo = sudo
        self._installed = False
        self._public_key: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def installed(self) -> bool:
        return self._installed

    def reset(self) -> None:
        """Forget the installed flag and the cached public key."""
        with self._lock:
            self._installed = False
            self._public_key = None

    def public_key(self, refresh: bool = False) -> str:
        """``<type> <base64>`` of the configured public key, comment dropped."""
        with self._lock:
            if self._public_key is None or refresh:
                raw = Path(self.settings.gitolite_ssh_public_key).read_text(encoding="utf-8").strip()
                fields = _KEY_FIELD_SPLIT_RE.split(raw) + ["", ""]
                self._public_key = f"{fields[0]} {fields[1]}".strip()
            return self._public_key

    def install(self, reset: bool = False) -> bool:
        """Install the mirroring keys unless already done; return the installed state."""
        with self._lock:
            if reset:
                self._installed = False
            if self._installed:
                return True

            logger.info("Installing gitolite mirroring SSH keys ...")
            try:
                self._install_once()
            except (CommandFailure, ConfigurationError, OSError) as e:
                logger.error("Failed installing gitolite mirroring SSH keys !")
                logger.error("%s", e)
                self._installed = False
                return False

            logger.info("Done !")
            self._installed = True
            return True

    def _install_once(self) -> None:
        private_key = Path(self.settings.gitolite_ssh_private_key).read_text(encoding="utf-8")
        public_key = Path(self.settings.gitolite_ssh_public_key).read_text(encoding="utf-8")

        self.sudo.capture("mkdir", "-p", home_path(SSH_DIR))
        self.sudo.write(MIRRORING_PRIVATE_KEY_PATH, private_key, mode="600")
        self.sudo.write(MIRRORING_PUBLIC_KEY_PATH, public_key, mode="644")

        home_dir = self.sudo.capture("printenv", "HOME").strip()
        if not home_dir:
            raise CommandFailure(["printenv", "HOME"], "service account has no HOME")

        self.sudo.write(MIRRORING_SCRIPT_PATH, build_mirroring_script(home_dir), mode="700")
