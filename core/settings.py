"""Gitolite endpoint settings supplied by the host application.

Loading never validates. A missing required value surfaces as
``ConfigurationError`` from the first accessor that needs it.
"""

from __future__ import annotations

from typing import Dict, Optional

from core.errors import ConfigurationError
from utils.constants import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_KEY_SUBDIR,
    DEFAULT_SSH_HOST,
    DEFAULT_SSH_PORT,
    HOOKS_URL_PATH,
)

_TRUE_VALUES = {"true", "1"}


class GitoliteSettings:
    def __init__(self, config: Optional[dict] = None):
        cfg = config or {}
        gitolite = cfg.get("gitolite")
        self._values: Dict[str, object] = dict(gitolite) if isinstance(gitolite, dict) else {}
        host = cfg.get("host")
        self._host: Dict[str, object] = dict(host) if isinstance(host, dict) else {}

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._values.get(key)
        if value is None:
            return default
        text = str(value).strip()
        return text if text else default

    def require(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise ConfigurationError(key, f"Required gitolite setting '{key}' is not configured")
        return value

    def is_enabled(self, key: str) -> bool:
        value = self._values.get(key)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    # ── Endpoint ──

    @property
    def gitolite_user(self) -> str:
        return self.require("gitolite_user")

    @property
    def gitolite_server_host(self) -> str:
        return self.get("gitolite_server_host", DEFAULT_SSH_HOST)

    @property
    def gitolite_server_port(self) -> str:
        return self.get("gitolite_server_port", DEFAULT_SSH_PORT)

    @property
    def gitolite_url(self) -> str:
        return f"{self.gitolite_user}@{self.gitolite_server_host}"

    @property
    def gitolite_ssh_private_key(self) -> str:
        return self.require("gitolite_ssh_private_key")

    @property
    def gitolite_ssh_public_key(self) -> str:
        return self.require("gitolite_ssh_public_key")

    # ── Admin repository ──

    @property
    def git_config_username(self) -> str:
        return self.require("git_config_username")

    @property
    def git_config_email(self) -> str:
        return self.require("git_config_email")

    @property
    def commit_author(self) -> str:
        return f"{self.git_config_username} <{self.git_config_email}>"

    @property
    def gitolite_admin_dir(self) -> str:
        return self.require("gitolite_admin_dir")

    @property
    def gitolite_config_file(self) -> str:
        return self.get("gitolite_config_file", DEFAULT_CONFIG_FILE)

    @property
    def gitolite_key_subdir(self) -> str:
        return self.get("gitolite_key_subdir", DEFAULT_KEY_SUBDIR)

    def admin_settings(self) -> Dict[str, str]:
        """Settings needed to open the gitolite-admin repository."""
        return {
            "git_user": self.gitolite_user,
            "host": self.require("ssh_server_domain"),
            "author_name": self.git_config_username,
            "author_email": self.git_config_email,
            "public_key": self.gitolite_ssh_public_key,
            "private_key": self.gitolite_ssh_private_key,
            "key_subdir": self.gitolite_key_subdir,
            "config_file": self.gitolite_config_file,
        }

    # ── Public domains ──

    @property
    def http_server_domain(self) -> Optional[str]:
        return self.get("http_server_domain")

    @property
    def https_server_domain(self) -> Optional[str]:
        return self.get("https_server_domain")

    @property
    def ssh_server_domain(self) -> Optional[str]:
        return self.get("ssh_server_domain")

    @property
    def hooks_url(self) -> str:
        protocol = str(self._host.get("protocol") or "http").strip()
        host_name = str(self._host.get("host_name") or "").strip()
        if not host_name:
            raise ConfigurationError("host.host_name")
        return f"{protocol}://{host_name}{HOOKS_URL_PATH}"
