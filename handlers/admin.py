"""Administrative actions: mirroring keys and setup diagnostics."""

import logging
from typing import Any, Dict

from handlers.base import GitoliteHandler

logger = logging.getLogger(__name__)


class AdminHandler(GitoliteHandler):
    name = "admin"
    actions = frozenset({"install_mirroring_keys", "check_setup", "flush_settings_cache"})

    def install_mirroring_keys(self) -> bool:
        return self.context.mirroring.install(reset=bool(self.options.get("reset", False)))

    def check_setup(self) -> Dict[str, Any]:
        """Collect the probe results an administrator needs to verify the setup."""
        probes = self.context.probes
        refresh = bool(self.options.get("refresh", False))
        version = probes.gitolite_version(refresh=refresh)
        return {
            "gitolite_version": version,
            "gitolite_banner": probes.gitolite_banner(refresh=refresh),
            "can_sudo": probes.can_sudo_to_gitolite_user(refresh=refresh),
            "setup_command": " ".join(probes.gitolite_setup_command()),
            "mirroring_keys_installed": self.context.mirroring.installed,
        }

    def flush_settings_cache(self) -> bool:
        logger.info("Flushing gitolite probe cache")
        self.context.probes.invalidate()
        return True
