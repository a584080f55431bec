"""Cached read-only probes of the gitolite installation.

Probes never raise. A failure becomes a sentinel (``None``, an error
banner, ``False``) that is cached like any other result until invalidated.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Tuple

from core.settings import GitoliteSettings
from core.ssh import SshChannel
from core.sudo import SudoChannel
from utils.constants import (
    CACHE_KEY_BANNER,
    CACHE_KEY_SUDO_TEST,
    CACHE_KEY_VERSION,
    DEFAULT_CACHE_NAMESPACE,
    GITOLITE2_SETUP_COMMAND,
    GITOLITE2_VERSION_PATTERN,
    GITOLITE3_MARKER,
    GITOLITE3_SETUP_COMMAND,
    PROBE_CACHE_KEYS,
)

logger = logging.getLogger(__name__)

_GITOLITE2_RE = re.compile(GITOLITE2_VERSION_PATTERN)


class GitoliteProbes:
    def __init__(
        self,
        settings: GitoliteSettings,
        sudo: SudoChannel,
        ssh: SshChannel,
        cache,
        namespace: str = DEFAULT_CACHE_NAMESPACE,
    ):
        self.settings = settings
        self.sudo = sudo
        self.ssh = ssh
        self.cache = cache
        self.namespace = str(namespace or DEFAULT_CACHE_NAMESPACE)

    def cache_key(self, name: str) -> str:
        return f"{self.namespace}:{name}"

    def invalidate(self, *names: str) -> None:
        """Forget cached probe results so the next call probes again."""
        for name in names or PROBE_CACHE_KEYS:
            self.cache.delete(self.cache_key(name))
        logger.debug("Probe cache cleared for: %s", ", ".join(names) if names else "all")

    def _fetch(self, name: str, compute, refresh: bool):
        key = self.cache_key(name)
        if refresh:
            self.cache.delete(key)
        return self.cache.fetch(key, compute)

    # ── Version ──

    def _probe_version(self) -> Optional[int]:
        logger.debug("Gitolite updating version")
        try:
            out, err, _code = self.ssh.shell("info")
        except Exception as e:  # noqa: BLE001
            logger.error("Couldn't retrieve gitolite version through SSH: %s", e)
            return None
        if GITOLITE3_MARKER in out:
            return 3
        if _GITOLITE2_RE.search(out):
            return 2
        logger.error("Couldn't retrieve gitolite version through SSH.")
        if err:
            logger.error("Gitolite version error output: %s", err.strip())
        return None

    def gitolite_version(self, refresh: bool = False) -> Optional[int]:
        return self._fetch(CACHE_KEY_VERSION, self._probe_version, refresh)

    def gitolite_setup_command(self) -> Tuple[str, ...]:
        if self.gitolite_version() == 2:
            return GITOLITE2_SETUP_COMMAND
        return GITOLITE3_SETUP_COMMAND

    # ── Banner ──

    def _probe_banner(self) -> str:
        logger.debug("Retrieving gitolite banner")
        try:
            return self.ssh.capture("info")
        except Exception as e:  # noqa: BLE001
            errstr = f"Error while getting Gitolite banner: {e}"
            logger.error(errstr)
            return errstr

    def gitolite_banner(self, refresh: bool = False) -> str:
        return self._fetch(CACHE_KEY_BANNER, self._probe_banner, refresh)

    # ── Sudo ──

    def _probe_sudo(self) -> bool:
        try:
            user = self.settings.gitolite_user
            out = self.sudo.capture("whoami")
        except Exception as e:  # noqa: BLE001
            logger.error("Exception during sudo config test: %s", e)
            return False
        return re.search(re.escape(user), out, flags=re.IGNORECASE) is not None

    def can_sudo_to_gitolite_user(self, refresh: bool = False) -> bool:
        return self._fetch(CACHE_KEY_SUDO_TEST, self._probe_sudo, refresh)
