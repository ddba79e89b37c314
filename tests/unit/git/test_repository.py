"""Unit tests for the git facade: output parsers and argument vectors."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from gitgate.config import TimeoutConfig
from gitgate.exceptions import CommandFailedError
from gitgate.git import (
    CommitInfo,
    GitRepository,
    is_nothing_to_commit,
    parse_log,
    parse_oneline_log,
    parse_porcelain,
)
from gitgate.models import RepositoryContext
from gitgate.runners import CommandResult


def _result(stdout: str = "") -> CommandResult:
    return CommandResult(returncode=0, stdout=stdout, stderr="", duration_ms=1)


@pytest.fixture
def context(tmp_path: Path) -> RepositoryContext:
    return RepositoryContext(
        name="web-app",
        working_directory=tmp_path,
        remote_name="upstream",
        local_branch="dev",
        remote_branch="main",
        push_flags="--progress --no-verify",
    )


@pytest.fixture
def runner() -> MagicMock:
    runner = MagicMock()
    runner.run = AsyncMock(return_value=_result())
    return runner


@pytest.fixture
def repo(context: RepositoryContext, runner: MagicMock) -> GitRepository:
    return GitRepository(
        context=context,
        runner=runner,
        timeouts=TimeoutConfig(read=30, stage=60, push=300, pull=300),
        push_retries=2,
    )


class TestParsePorcelain:
    def test_categorizes_entries(self) -> None:
        output = (
            "M  staged.py\n"
            " M unstaged.py\n"
            "MM both.py\n"
            "A  added.py\n"
            " D deleted.py\n"
            "R  old.py -> new.py\n"
            "?? untracked.txt\n"
        )

        status = parse_porcelain(output)

        assert status.staged == ("staged.py", "both.py", "added.py", "new.py")
        assert status.unstaged == ("unstaged.py", "both.py", "deleted.py")
        assert status.untracked == ("untracked.txt",)
        assert status.has_changes is True

    def test_leading_space_of_first_line_preserved(self) -> None:
        status = parse_porcelain(" M only-worktree.py\n")

        assert status.staged == ()
        assert status.unstaged == ("only-worktree.py",)

    def test_clean_tree(self) -> None:
        status = parse_porcelain("")

        assert status.has_changes is False
        assert status.staged == status.unstaged == status.untracked == ()


class TestParseLog:
    def test_full_format(self) -> None:
        output = (
            "abc123|Ada Lovelace|ada@example.com|2025-01-02|Fix parser\n"
            "def456|Bob|bob@example.com|2025-01-01|Use a | in subject\n"
        )

        commits = parse_log(output)

        assert commits == [
            CommitInfo("abc123", "Fix parser", "Ada Lovelace", "ada@example.com", "2025-01-02"),
            CommitInfo("def456", "Use a | in subject", "Bob", "bob@example.com", "2025-01-01"),
        ]

    def test_oneline_format(self) -> None:
        commits = parse_oneline_log("abc1234 Fix parser\ndef5678 Initial commit\n\n")

        assert [c.to_dict() for c in commits] == [
            {"hash": "abc1234", "message": "Fix parser"},
            {"hash": "def5678", "message": "Initial commit"},
        ]

    def test_full_to_dict_keeps_all_fields(self) -> None:
        commit = parse_log("abc|Ada|ada@example.com|2025-01-02|Fix")[0]

        assert commit.to_dict() == {
            "hash": "abc",
            "author": "Ada",
            "email": "ada@example.com",
            "date": "2025-01-02",
            "message": "Fix",
        }


class TestNothingToCommit:
    def test_detected_in_stdout(self) -> None:
        error = CommandFailedError(
            "exit 1", exit_code=1, stdout="nothing to commit, working tree clean\n"
        )
        assert is_nothing_to_commit(error) is True

    def test_detected_in_stderr(self) -> None:
        error = CommandFailedError("exit 1", exit_code=1, stderr="Nothing to commit")
        assert is_nothing_to_commit(error) is True

    def test_other_failure(self) -> None:
        error = CommandFailedError("exit 1", exit_code=1, stderr="hook failed")
        assert is_nothing_to_commit(error) is False


class TestGitRepository:
    @pytest.mark.asyncio
    async def test_status_runs_porcelain_in_working_directory(
        self, repo: GitRepository, runner: MagicMock, context: RepositoryContext
    ) -> None:
        runner.run.return_value = _result("?? new.txt\n")

        status = await repo.status()

        runner.run.assert_awaited_once_with(
            ["git", "status", "--porcelain"],
            cwd=context.working_directory,
            timeout=30,
            max_retries=0,
        )
        assert status.untracked == ("new.txt",)

    @pytest.mark.asyncio
    async def test_diff_staged_with_files(
        self, repo: GitRepository, runner: MagicMock
    ) -> None:
        await repo.diff(staged=True, files=["a.py", "b.py"])

        argv = runner.run.call_args.args[0]
        assert argv == ["git", "diff", "--cached", "--", "a.py", "b.py"]

    @pytest.mark.asyncio
    async def test_add_uses_given_timeout(
        self, repo: GitRepository, runner: MagicMock
    ) -> None:
        await repo.add((".",), timeout=60)

        assert runner.run.call_args.args[0] == ["git", "add", "."]
        assert runner.run.call_args.kwargs["timeout"] == 60

    @pytest.mark.asyncio
    async def test_log_full_format(self, repo: GitRepository, runner: MagicMock) -> None:
        await repo.log(5)

        assert runner.run.call_args.args[0] == [
            "git",
            "log",
            "--pretty=format:%H|%an|%ae|%ad|%s",
            "--date=short",
            "-n",
            "5",
        ]

    @pytest.mark.asyncio
    async def test_commit_passes_message_as_single_argument(
        self, repo: GitRepository, runner: MagicMock
    ) -> None:
        await repo.commit("feat: add $HOME `whoami`")

        assert runner.run.call_args.args[0] == [
            "git",
            "commit",
            "-m",
            "feat: add $HOME `whoami`",
        ]

    @pytest.mark.asyncio
    async def test_push_builds_refspec_and_flags(
        self, repo: GitRepository, runner: MagicMock
    ) -> None:
        await repo.push()

        call = runner.run.call_args
        assert call.args[0] == [
            "git",
            "push",
            "upstream",
            "dev:main",
            "--progress",
            "--no-verify",
        ]
        assert call.kwargs["timeout"] == 300
        assert call.kwargs["max_retries"] == 2

    @pytest.mark.asyncio
    async def test_pull_prefers_pull_source_branch(
        self, context: RepositoryContext, runner: MagicMock
    ) -> None:
        ctx = context.model_copy(update={"pull_source_branch": "release"})
        repo = GitRepository(context=ctx, runner=runner)

        await repo.pull()

        assert runner.run.call_args.args[0] == ["git", "pull", "upstream", "release"]

    @pytest.mark.asyncio
    async def test_pull_defaults_to_remote_branch(
        self, repo: GitRepository, runner: MagicMock
    ) -> None:
        await repo.pull()

        assert runner.run.call_args.args[0] == ["git", "pull", "upstream", "main"]
