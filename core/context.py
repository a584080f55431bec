"""Runtime context owning every component of the gitolite bridge.

State that used to be process-wide (installed flag, cached public key,
current OS user) lives on objects owned by one context, each guarded by
its own lock.
"""

from __future__ import annotations

import logging
import os
import pwd
import threading
from typing import Any, Dict, Optional

from core.cache import MemoryCache
from core.dispatcher import Dispatcher, HandlerRegistry
from core.filesystem import GitoliteFilesystem
from core.mirroring import MirroringKeyInstaller
from core.probes import GitoliteProbes
from core.settings import GitoliteSettings
from core.ssh import SshChannel
from core.sudo import SudoChannel
from utils.constants import DEFAULT_CACHE_NAMESPACE

logger = logging.getLogger(__name__)


def _optional_float(value) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return None
    return float(value)


class GitHostingContext:
    def __init__(
        self,
        config: Optional[dict] = None,
        *,
        cache=None,
        registry: Optional[HandlerRegistry] = None,
    ):
        cfg = config or {}
        self.config = cfg
        self.settings = GitoliteSettings(cfg)

        shell_cfg = cfg.get("shell")
        shell_cfg = shell_cfg if isinstance(shell_cfg, dict) else {}
        timeout = _optional_float(shell_cfg.get("timeout_seconds"))
        self.sudo = SudoChannel(
            self.settings,
            sudo_bin=str(shell_cfg.get("sudo_bin", "sudo")),
            timeout_seconds=timeout,
        )
        self.ssh = SshChannel(
            self.settings,
            ssh_bin=str(shell_cfg.get("ssh_bin", "ssh")),
            timeout_seconds=timeout,
        )
        self.fs = GitoliteFilesystem(self.sudo)

        cache_cfg = cfg.get("cache")
        cache_cfg = cache_cfg if isinstance(cache_cfg, dict) else {}
        self.cache = cache if cache is not None else MemoryCache(
            ttl_seconds=_optional_float(cache_cfg.get("ttl_seconds"))
        )
        self.probes = GitoliteProbes(
            self.settings,
            self.sudo,
            self.ssh,
            self.cache,
            namespace=str(cache_cfg.get("namespace") or DEFAULT_CACHE_NAMESPACE),
        )
        self.mirroring = MirroringKeyInstaller(self.settings, self.sudo)

        if registry is None:
            from handlers import default_registry

            registry = default_registry()
        self.dispatcher = Dispatcher(self, registry)

        self._user_lock = threading.Lock()
        self._current_user: Optional[str] = None

    def update(self, action: str, subject: Any = None, options: Optional[Dict[str, Any]] = None) -> Any:
        """Run a management action through the handler registry."""
        return self.dispatcher.update(action, subject, options)

    def current_user(self, refresh: bool = False) -> str:
        """Name of the OS user running this process."""
        with self._user_lock:
            if self._current_user is None or refresh:
                self._current_user = pwd.getpwuid(os.geteuid()).pw_name
            return self._current_user

    @property
    def admin_dir(self) -> str:
        admin_dir = self.settings.gitolite_admin_dir
        logger.info("Accessing gitolite-admin.git at '%s'", admin_dir)
        return admin_dir

    def admin_settings(self) -> Dict[str, str]:
        return self.settings.admin_settings()

    def reset(self) -> None:
        """Drop all cached state, e.g. after the settings changed."""
        self.probes.invalidate()
        self.mirroring.reset()
        with self._user_lock:
            self._current_user = None
