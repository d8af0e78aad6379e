"""Tests for publishing update commands as a chain of remote commits."""

import json
import os
import logging

import pytest

from pyupdeps.packagemanager import SkippedUpdate, UpdateCommand
from pyupdeps.packagemanager.composer import ComposerPackageManager
from pyupdeps.typing import CommandError, GitHubAPIError
from pyupdeps.updater.commit_chain import CommitChain
from pyupdeps.tests.fake_github import START_SHA
from pyupdeps.tests.utils import ScriptedRunner, bump_lock, write_manifest

BRANCH = "update-deps/composer.json"


def command(workspace, name: str) -> UpdateCommand:
    return UpdateCommand(
        args=["composer", "update", name, "--with-dependencies"],
        cwd=str(workspace),
        description=f"Update {name} to 2.0.0",
    )


@pytest.fixture
def manifest(workspace) -> str:
    return write_manifest(str(workspace), {"acme/a": "^1.0", "acme/b": "^1.0", "acme/c": "^1.0"})


def make_chain(github, workspace, manifest, runner) -> CommitChain:
    return CommitChain(
        github,
        runner,
        ComposerPackageManager(runner),
        workspace=str(workspace),
        branch_name=BRANCH,
        manifest_path=manifest,
        start_oid=START_SHA,
    )


class TestCommitChain:
    """Ordered commits, each expecting the previous one at the branch tip."""

    def test_commits_are_chained(self, github, fake_github, workspace, manifest) -> None:
        """Test that N commands produce N commits, each on top of the previous."""
        fake_github.add_ref(BRANCH, START_SHA)
        runner = ScriptedRunner(on_update=bump_lock)
        chain = make_chain(github, workspace, manifest, runner)

        commits = chain.apply([command(workspace, n) for n in ("acme/a", "acme/b", "acme/c")])

        assert len(commits) == 3
        assert [c.oid for c in fake_github.commits] == commits
        assert fake_github.commits[0].parent == START_SHA
        assert fake_github.commits[1].parent == commits[0]
        assert fake_github.commits[2].parent == commits[1]
        assert fake_github.refs[BRANCH].oid == commits[-1]
        assert chain.token == commits[-1]
        assert [c.headline for c in fake_github.commits] == [
            "Update acme/a to 2.0.0", "Update acme/b to 2.0.0", "Update acme/c to 2.0.0",
        ]

    def test_commit_contains_touched_files(self, github, fake_github, workspace, manifest) -> None:
        """Test that the manifest and lock file are committed with workspace-relative paths."""
        fake_github.add_ref(BRANCH, START_SHA)
        runner = ScriptedRunner(on_update=bump_lock)
        make_chain(github, workspace, manifest, runner).apply([command(workspace, "acme/a")])

        record = fake_github.commits[0]
        assert [a["path"] for a in record.additions] == ["composer.json", "composer.lock"]
        lock = json.loads(record.file("composer.lock"))
        assert lock["packages"] == [{"args": ["acme/a", "--with-dependencies"]}]
        with open(manifest, "rb") as f:
            assert record.file("composer.json") == f.read()

    def test_runs_command_before_committing(self, github, fake_github, workspace, manifest) -> None:
        fake_github.add_ref(BRANCH, START_SHA)
        runner = ScriptedRunner(on_update=bump_lock)
        make_chain(github, workspace, manifest, runner).apply([command(workspace, "acme/a")])

        cwd, args, _, label = runner.calls[0]
        assert cwd == str(workspace)
        assert args == ["composer", "update", "acme/a", "--with-dependencies"]
        assert label == "Preparing update: Update acme/a to 2.0.0"

    def test_skipped_entries_are_not_committed(self, github, fake_github, workspace, manifest) -> None:
        fake_github.add_ref(BRANCH, START_SHA)
        runner = ScriptedRunner(on_update=bump_lock)
        plan = [
            SkippedUpdate(["acme/x", "acme/y"], "mixes dev and non-dev dependencies"),
            command(workspace, "acme/a"),
        ]
        commits = make_chain(github, workspace, manifest, runner).apply(plan)

        assert len(commits) == 1
        assert len(runner.update_commands) == 1

    def test_failure_keeps_earlier_commits(self, github, fake_github, workspace, manifest) -> None:
        """Test that a failing command stops the chain without undoing prior commits."""
        fake_github.add_ref(BRANCH, START_SHA)
        runner = ScriptedRunner(on_update=bump_lock, fail_on="acme/b")
        chain = make_chain(github, workspace, manifest, runner)

        with pytest.raises(CommandError):
            chain.apply([command(workspace, n) for n in ("acme/a", "acme/b", "acme/c")])

        assert len(fake_github.commits) == 1
        assert chain.commits == [fake_github.commits[0].oid]
        assert fake_github.refs[BRANCH].oid == fake_github.commits[0].oid

    def test_concurrent_push_rejects_next_commit(self, github, fake_github, workspace, manifest) -> None:
        """Test that a moved branch tip makes the next commit fail."""
        ref = fake_github.add_ref(BRANCH, START_SHA)

        def push_behind_our_back(cwd, args):
            if "acme/b" in args:
                ref.oid = "f" * 40

        runner = ScriptedRunner(on_update=push_behind_our_back)
        chain = make_chain(github, workspace, manifest, runner)

        with pytest.raises(GitHubAPIError, match="Expected branch to point to"):
            chain.apply([command(workspace, n) for n in ("acme/a", "acme/b")])
        assert len(fake_github.commits) == 1

    def test_missing_lock_file_is_skipped(self, github, fake_github, workspace, manifest, caplog) -> None:
        fake_github.add_ref(BRANCH, START_SHA)
        os.remove(os.path.join(str(workspace), "composer.lock"))
        runner = ScriptedRunner()

        with caplog.at_level(logging.WARNING):
            make_chain(github, workspace, manifest, runner).apply([command(workspace, "acme/a")])

        assert [a["path"] for a in fake_github.commits[0].additions] == ["composer.json"]
        assert "composer.lock does not exist" in caplog.text

    def test_nested_manifest_paths(self, github, fake_github, workspace) -> None:
        """Test that files below the workspace keep their directory in the commit."""
        nested = write_manifest(os.path.join(str(workspace), "app"), {"acme/a": "^1.0"})
        fake_github.add_ref("update-deps/app/composer.json", START_SHA)
        runner = ScriptedRunner(on_update=bump_lock)
        chain = CommitChain(
            github, runner, ComposerPackageManager(runner),
            workspace=str(workspace),
            branch_name="update-deps/app/composer.json",
            manifest_path=nested,
            start_oid=START_SHA,
        )
        chain.apply([command(os.path.dirname(nested), "acme/a")])

        assert [a["path"] for a in fake_github.commits[0].additions] == ["app/composer.json", "app/composer.lock"]
