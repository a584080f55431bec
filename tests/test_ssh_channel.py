"""Tests for core/ssh.py — the forced-command SSH channel."""

import pytest

from core.errors import CommandFailure, ConfigurationError
from core.settings import GitoliteSettings
from core.ssh import SshChannel


def test_shell_prefix_order(settings, sample_config, fake_run):
    SshChannel(settings).shell("info")
    key = sample_config["gitolite"]["gitolite_ssh_private_key"]
    assert fake_run.calls == [
        ["ssh", "-T", "-o", "BatchMode=yes", "git@localhost", "-p", "2222", "-i", key, "info"]
    ]


def test_default_host_and_port(tmp_path, fake_run):
    settings = GitoliteSettings(
        {"gitolite": {"gitolite_user": "gitolite3", "gitolite_ssh_private_key": "/k"}}
    )
    SshChannel(settings).shell("info")
    assert fake_run.calls[0][4:9] == ["gitolite3@localhost", "-p", "22", "-i", "/k"]


def test_capture_returns_stdout(settings, fake_run):
    fake_run.push(stdout="hello git, this is gitolite3 v3.6.6 running gitolite3 v3.6.6 on git 2.39\n")
    assert "running gitolite3" in SshChannel(settings).capture("info")


def test_capture_raises_on_nonzero_exit(settings, fake_run):
    fake_run.push(returncode=255, stderr="Permission denied (publickey).")
    with pytest.raises(CommandFailure, match="Permission denied"):
        SshChannel(settings).capture("info")


def test_argument_with_metacharacters_is_not_split(settings, fake_run):
    SshChannel(settings).shell("perms", "repo name;id")
    assert fake_run.calls[0][-2:] == ["perms", "repo name;id"]


def test_missing_private_key_fails_at_first_use(fake_run):
    channel = SshChannel(GitoliteSettings({"gitolite": {"gitolite_user": "git"}}))
    with pytest.raises(ConfigurationError, match="gitolite_ssh_private_key"):
        channel.shell("info")
    assert fake_run.calls == []
