"""Tests for the built-in handlers, dispatched through a context."""

import pytest

from core.cache import MemoryCache
from core.context import GitHostingContext
from core.errors import DispatchError
from core.filesystem import GitoliteFilesystem
from core.mirroring import MirroringKeyInstaller
from core.probes import GitoliteProbes
from core.shell import ShellResult


@pytest.fixture
def context(sample_config, fake_channel):
    ctx = GitHostingContext(sample_config)
    ctx.fs = GitoliteFilesystem(fake_channel)
    ctx.probes = GitoliteProbes(ctx.settings, fake_channel, fake_channel, MemoryCache(), namespace="test")
    ctx.mirroring = MirroringKeyInstaller(ctx.settings, fake_channel)
    return ctx


class TestRepositoryHandler:

    def test_move_repository(self, context, fake_channel):
        fake_channel.shell_results = [ShellResult("", "", 1)]  # target missing
        result = context.update("move_repository", "repos/old.git", {"new_path": "repos/grp/new.git"})
        assert result["ok"] is True
        assert fake_channel.shell_calls == [("test", "-r", "repos/grp/new.git")]
        assert fake_channel.capture_calls[-1] == ("mv", "$HOME/repos/old.git", "$HOME/repos/grp/new.git")

    def test_move_repository_refuses_existing_target(self, context, fake_channel):
        result = context.update("move_repository", "repos/old.git", {"new_path": "repos/new.git"})
        assert result == {"ok": False, "reason": "target_exists", "new_path": "repos/new.git"}
        assert fake_channel.capture_calls == []

    def test_move_repository_requires_new_path(self, context, fake_channel):
        assert context.update("move_repository", "repos/old.git") == {"ok": False, "reason": "new_path_required"}
        assert fake_channel.shell_calls == []

    def test_delete_single_repository(self, context, fake_channel):
        results = context.update("delete_repositories", "repos/a.git", {"force": True})
        assert [r["ok"] for r in results] == [True]
        assert fake_channel.capture_calls == [("rm", "-rf", "$HOME/repos/a.git")]

    def test_delete_repositories_prunes_empty_parents(self, context, fake_channel):
        fake_channel.shell_results = [
            ShellResult("/home/git/repos/grp/sub\n", "", 0),
            ShellResult("", "", 0),  # repos/grp not empty
        ]
        context.update(
            "delete_repositories",
            ["repos/grp/sub/a.git"],
            {"force": True, "prune_parents": True},
        )
        assert fake_channel.capture_calls == [
            ("rm", "-rf", "$HOME/repos/grp/sub/a.git"),
            ("rmdir", "$HOME/repos/grp/sub"),
        ]

    def test_delete_continues_after_failure(self, context, fake_channel):
        fake_channel.fail_capture_on = "rmdir"
        results = context.update("delete_repositories", ["repos/a.git", "repos/b.git"])
        assert [r["ok"] for r in results] == [False, False]
        assert len(fake_channel.capture_calls) == 2


class TestProjectHandler:

    def test_move_hierarchy_skips_identical_pairs_and_cleans_parent(self, context, fake_channel):
        fake_channel.shell_results = [ShellResult("/home/git/repos/old\n", "", 0)]
        results = context.update(
            "move_project_hierarchy",
            [("repos/old/a.git", "repos/new/a.git"), ("repos/same.git", "repos/same.git")],
        )
        assert len(results) == 1
        assert fake_channel.capture_calls == [
            ("mkdir", "-p", "$HOME/repos/new"),
            ("mv", "$HOME/repos/old/a.git", "$HOME/repos/new/a.git"),
            ("rmdir", "$HOME/repos/old"),
        ]

    def test_absolute_pair_moves_and_cleans_the_same_tree(self, context, fake_channel):
        fake_channel.shell_results = [ShellResult("/home/git/srv/git/a\n", "", 0)]
        context.update("move_project_hierarchy", [("/srv/git/a/b.git", "/srv/git/c/b.git")])
        assert fake_channel.capture_calls == [
            ("mkdir", "-p", "$HOME/srv/git/c"),
            ("mv", "$HOME/srv/git/a/b.git", "$HOME/srv/git/c/b.git"),
            ("rmdir", "$HOME/srv/git/a"),
        ]
        assert fake_channel.shell_calls == [("find", "$HOME/srv/git/a", "-prune", "-empty", "-type", "d")]

    def test_failed_move_leaves_old_parent(self, context, fake_channel):
        fake_channel.fail_capture_on = "mv"
        results = context.update("move_project_hierarchy", [("repos/old/a.git", "repos/new/a.git")])
        assert results[0]["ok"] is False
        assert fake_channel.shell_calls == []


class TestAdminHandler:

    def test_check_setup(self, context, fake_channel):
        fake_channel.shell_results = [ShellResult("hello, running gitolite3 v3.6", "", 0)]
        fake_channel.capture_results = ["banner text", "git\n"]
        report = context.update("check_setup")
        assert report == {
            "gitolite_version": 3,
            "gitolite_banner": "banner text",
            "can_sudo": True,
            "setup_command": "gitolite setup",
            "mirroring_keys_installed": False,
        }

    def test_flush_settings_cache(self, context, fake_channel):
        context.update("check_setup")
        assert context.update("flush_settings_cache") is True
        context.update("check_setup")
        assert len(fake_channel.shell_calls) == 2

    def test_install_mirroring_keys(self, context, fake_channel):
        fake_channel.capture_results = ["", "/home/git\n"]
        assert context.update("install_mirroring_keys") is True
        assert context.mirroring.installed is True


def test_unknown_action(context):
    with pytest.raises(DispatchError):
        context.update("add_user")
