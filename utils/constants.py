"""
Centralized constants for the gitolite bridge.

On-disk names on the service account's side must stay stable across
versions: installed hosts already have files under these names.
"""

# ── Endpoint defaults ──
DEFAULT_SSH_HOST = "localhost"
DEFAULT_SSH_PORT = "22"
DEFAULT_CONFIG_FILE = "gitolite.conf"
DEFAULT_KEY_SUBDIR = "git_hosting"

# ── Privileged invocation prefixes ──
# sudo: login shell (-i, sets $HOME), non-interactive (-n), target user (-u)
SUDO_FLAGS = ("-i", "-n", "-u")
# ssh: no tty (-T), never prompt for password/passphrase
SSH_FLAGS = ("-T", "-o", "BatchMode=yes")

# Prefix the sudo login shell expands to the service account's home.
HOME_PREFIX = "$HOME"

# ── Probe cache ──
DEFAULT_CACHE_NAMESPACE = "git_hosting"
CACHE_KEY_VERSION = "gitolite_version"
CACHE_KEY_BANNER = "gitolite_banner"
CACHE_KEY_SUDO_TEST = "test_gitolite_sudo"
PROBE_CACHE_KEYS = (CACHE_KEY_VERSION, CACHE_KEY_BANNER, CACHE_KEY_SUDO_TEST)

GITOLITE3_MARKER = "running gitolite3"
GITOLITE2_VERSION_PATTERN = r"gitolite[ -]v?2."
GITOLITE2_SETUP_COMMAND = ("gl-setup",)
GITOLITE3_SETUP_COMMAND = ("gitolite", "setup")

# ── Mirroring keys (relative to the service account's home) ──
IDENTIFIER_DEFAULT_PREFIX = "redmine_"
MIRRORING_KEYS_NAME = f"{IDENTIFIER_DEFAULT_PREFIX}gitolite_admin_id_rsa_mirroring"
SSH_DIR = ".ssh"
MIRRORING_PRIVATE_KEY_PATH = f"{SSH_DIR}/{MIRRORING_KEYS_NAME}"
MIRRORING_PUBLIC_KEY_PATH = f"{SSH_DIR}/{MIRRORING_KEYS_NAME}.pub"
MIRRORING_SCRIPT_PATH = f"{SSH_DIR}/run_gitolite_admin_ssh"

# ── Hooks ──
HOOKS_URL_PATH = "/githooks/post-receive/redmine"
