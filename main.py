#!/usr/bin/env python3
"""
Gitolite bridge - command line entry point
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from core.context import GitHostingContext
from core.errors import GitHostingError
from utils.helpers import load_config, parse_options


def parse_cli_args(argv=None):
    """Parse runtime CLI arguments."""
    parser = argparse.ArgumentParser(description="Gitolite bridge")
    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to config YAML file (default: config.yaml)",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate and print resolved settings, then exit",
    )
    parser.add_argument(
        "--probe",
        action="store_true",
        help="Print gitolite version, banner and sudo test results",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore cached probe results",
    )
    parser.add_argument(
        "--install-mirroring-keys",
        action="store_true",
        help="Install mirroring SSH keys for the gitolite user",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Reinstall mirroring keys even if already installed",
    )
    parser.add_argument(
        "--action",
        default=None,
        help="Management action to dispatch (e.g. move_repository)",
    )
    parser.add_argument(
        "--subject",
        action="append",
        default=None,
        help="Action subject; repeat for list subjects",
    )
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        help="Action option as key=value (repeatable)",
    )
    return parser.parse_args(argv)


def setup_logging(config: dict):
    """Setup logging based on configuration"""
    log_config = config.get('logging', {}) or {}
    level = getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stderr)]

    log_file = log_config.get('file')
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        handlers=handlers,
    )


def setup_audit_logger(config: dict):
    """Setup dedicated JSONL audit logger for privileged commands if enabled."""
    audit_conf = (config.get('logging', {}) or {}).get('audit', {}) or {}
    if not audit_conf.get('enabled', False):
        return None

    audit_file = audit_conf.get('file', './logs/audit.log')
    Path(audit_file).parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger('audit')
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.handlers.clear()
    handler = logging.FileHandler(audit_file)
    handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(handler)
    return logger


def print_settings_summary(context: GitHostingContext, args) -> None:
    settings = context.settings
    print("✅ Config validation passed")
    print(f"config: {args.config}")
    print(f"gitolite_user: {settings.get('gitolite_user')}")
    print(f"gitolite_url: {settings.get('gitolite_user')}@{settings.gitolite_server_host}")
    print(f"gitolite_server_port: {settings.gitolite_server_port}")
    print(f"gitolite_ssh_private_key: {settings.get('gitolite_ssh_private_key')}")
    print(f"gitolite_ssh_public_key: {settings.get('gitolite_ssh_public_key')}")
    print(f"gitolite_admin_dir: {settings.get('gitolite_admin_dir')}")
    print(f"gitolite_config_file: {settings.gitolite_config_file}")
    print(f"sudo_bin: {context.sudo.sudo_bin}")
    print(f"ssh_bin: {context.ssh.ssh_bin}")
    print(f"timeout_seconds: {context.sudo.timeout_seconds}")


def _print_json(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True, default=str))


def run(context: GitHostingContext, args) -> int:
    if args.validate_only:
        print_settings_summary(context, args)
        return 0

    if args.probe:
        _print_json(context.update("check_setup", None, {"refresh": args.refresh}))

    if args.install_mirroring_keys:
        installed = context.update("install_mirroring_keys", None, {"reset": args.reset})
        _print_json({"mirroring_keys_installed": installed})
        if not installed:
            return 1

    if args.action:
        subject = args.subject
        if subject is not None and len(subject) == 1:
            subject = subject[0]
        _print_json(context.update(args.action, subject, parse_options(args.option)))

    return 0


def main(argv=None) -> int:
    """Main application entry point"""
    args = parse_cli_args(argv)

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"❌ Failed to load configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config)
    setup_audit_logger(config)
    logger = logging.getLogger(__name__)

    context = GitHostingContext(config)
    try:
        return run(context, args)
    except GitHostingError as e:
        logger.error("%s", e)
        print(f"❌ {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
