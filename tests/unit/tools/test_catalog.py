"""Unit tests for tool naming, lookup, descriptors and the environment snapshot."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gitgate.config import GitGateConfig
from gitgate.exceptions import MethodNotFoundError
from gitgate.state import AppState, build_state
from gitgate.tools import (
    ToolName,
    build_tool_catalog,
    environment_snapshot,
    exposed_tool_name,
    lookup_tool,
    strip_tool_prefix,
    success_response,
)
from gitgate.tools.constants import language_hints
from gitgate.tools.responses import changes_not_reviewed


def _by_name(catalog: list[dict]) -> dict[str, dict]:
    return {tool["name"]: tool for tool in catalog}


class TestNaming:
    def test_prefix_round_trip(self) -> None:
        assert exposed_tool_name(ToolName.GIT_PUSH) == "git_push"
        assert exposed_tool_name(ToolName.GIT_PUSH, "team") == "team_git_push"
        assert strip_tool_prefix("team_git_push", "team") == "git_push"
        assert strip_tool_prefix("git_push", "team") == "git_push"

    def test_language_hints(self) -> None:
        assert language_hints("zh").name == "Chinese"
        unknown = language_hints("fr")
        assert unknown.name == "fr"
        assert unknown.commit_example == language_hints("en").commit_example


class TestLookup:
    def test_prefixed_and_unprefixed_names(self, single_state: AppState) -> None:
        single_state.config.tool_prefix = "team"

        assert lookup_tool(single_state, "team_git_status").name is ToolName.GIT_STATUS
        assert lookup_tool(single_state, "git_status").name is ToolName.GIT_STATUS

    @pytest.mark.parametrize("name", [None, "", 42])
    def test_missing_name(self, single_state: AppState, name: object) -> None:
        with pytest.raises(MethodNotFoundError, match="Missing tool name"):
            lookup_tool(single_state, name)

    def test_unknown_tool(self, single_state: AppState) -> None:
        with pytest.raises(MethodNotFoundError, match="Unknown tool: rm_rf"):
            lookup_tool(single_state, "rm_rf")

    def test_set_log_dir_hidden_when_configured(self, single_state: AppState) -> None:
        assert single_state.log_dir_configured is True

        with pytest.raises(MethodNotFoundError):
            lookup_tool(single_state, "set_log_dir")

    def test_set_log_dir_hidden_in_single_mode_default(self, repo_dir: Path) -> None:
        state = build_state(
            GitGateConfig(
                project_path=repo_dir,
                local_branch="main",
                remote_branch="main",
                log_dir=None,
            )
        )

        assert state.log_dir_configured is True
        with pytest.raises(MethodNotFoundError):
            lookup_tool(state, "set_log_dir")

    def test_set_log_dir_available_without_log_dir(self, multi_state: AppState) -> None:
        spec = lookup_tool(multi_state, "set_log_dir")

        assert spec.context_scoped is False


class TestSingleCatalog:
    def test_lists_tools_without_set_log_dir(self, single_state: AppState) -> None:
        names = [tool["name"] for tool in build_tool_catalog(single_state)]

        assert names == [
            "git_push",
            "git_pull",
            "get_push_history",
            "get_operation_logs",
            "save_changes",
            "get_pending_changes",
            "git_status",
            "git_diff",
            "git_add",
            "git_log",
        ]

    def test_push_description_embeds_configuration(self, single_state: AppState) -> None:
        push = _by_name(build_tool_catalog(single_state))["git_push"]
        ctx = single_state.resolve(None).context

        assert "Push command: git push origin main:main --progress" in push["description"]
        assert str(ctx.working_directory) in push["description"]
        assert push["inputSchema"]["required"] == ["message"]
        assert 'Example: {"message": "Update project files"}' in push["description"]

    def test_save_changes_requires_files_and_content(self, single_state: AppState) -> None:
        tool = _by_name(build_tool_catalog(single_state))["save_changes"]

        assert tool["inputSchema"]["required"] == ["files", "content"]
        assert "limit" not in tool["inputSchema"]["properties"]

    def test_language_and_prefix(self, repo_dir: Path, log_dir: Path) -> None:
        state = build_state(
            GitGateConfig(
                project_path=repo_dir,
                repo_name="web",
                local_branch="main",
                remote_branch="main",
                tool_prefix="team",
                language="zh",
                log_dir=log_dir,
            )
        )

        push = _by_name(build_tool_catalog(state))["team_git_push"]

        assert push["description"].startswith("[web] ")
        assert "Chinese" in push["description"]
        assert "team_get_pending_changes" in push["description"]


class TestMultiCatalog:
    def test_repo_argument_required(self, multi_state: AppState) -> None:
        catalog = _by_name(build_tool_catalog(multi_state))
        status = catalog["git_status"]

        assert status["inputSchema"]["required"] == ["repo"]
        assert status["inputSchema"]["properties"]["repo"]["enum"] == ["web-app", "api"]
        assert "Available repositories:" in status["description"]
        assert "  - web-app: " in status["description"]

    def test_set_log_dir_has_no_repo(self, multi_state: AppState) -> None:
        tool = _by_name(build_tool_catalog(multi_state))["set_log_dir"]

        assert tool["inputSchema"]["required"] == ["log_dir"]
        assert "repo" not in tool["inputSchema"]["properties"]

    def test_save_changes_listing_form(self, multi_state: AppState) -> None:
        tool = _by_name(build_tool_catalog(multi_state))["save_changes"]

        assert tool["inputSchema"]["required"] == ["repo"]
        assert "limit" in tool["inputSchema"]["properties"]


class TestEnvironmentSnapshot:
    def test_single(self, single_state: AppState) -> None:
        target = single_state.resolve(None)
        target.journal.add_pending(["a"], "x", target.context)

        env = environment_snapshot(single_state)

        assert env["multi_instance"] is False
        assert env["pending_changes_count"] == 1
        assert env["changes_reviewed"] is False
        assert env["serverInfo"]["name"] == "gitgate"
        assert env["repositories"][0]["local_branch"] == "main"

    def test_multi(self, multi_state: AppState) -> None:
        env = environment_snapshot(multi_state)

        assert env["multi_instance"] is True
        assert env["log_dir"] is None
        assert env["serverInfo"]["name"] == "gitgate-multi"
        assert [r["repo_name"] for r in env["repositories"]] == ["web-app", "api"]
        assert "changes_reviewed" not in env


class TestResponses:
    def test_success_response_is_one_text_block(self) -> None:
        response = success_response({"path": Path("/tmp/x"), "name": "日本"})

        assert len(response["content"]) == 1
        assert json.loads(response["content"][0]["text"]) == {
            "path": "/tmp/x",
            "name": "日本",
        }
        assert "isError" not in response

    def test_guidance_response(self) -> None:
        response = changes_not_reviewed("get_pending_changes", 2, "api").to_response()

        assert response["isError"] is True
        assert response["errorCode"] == "CHANGES_NOT_REVIEWED"
        texts = [block["text"] for block in response["content"]]
        assert len(texts) == 8
        assert texts[0].startswith("ERROR:")
        assert '{"repo": "api", "limit": 1000}' in texts[3]
