"""Unit tests for tool argument validation."""

from __future__ import annotations

import pytest

from gitgate.exceptions import InvalidArgumentError
from gitgate.tools.arguments import (
    AddArgs,
    DiffArgs,
    LogArgs,
    OperationLogsArgs,
    PendingChangesArgs,
    PushArgs,
    SaveChangesArgs,
    SetLogDirArgs,
    ToolArguments,
    parse_arguments,
)


class TestParseArguments:
    def test_missing_arguments_use_defaults(self) -> None:
        args = parse_arguments(LogArgs, None)

        assert args.limit == 10
        assert args.oneline is False
        assert args.repo is None

    def test_unknown_keys_ignored(self) -> None:
        args = parse_arguments(ToolArguments, {"repo": "api", "verbose": True})

        assert args.repo == "api"

    def test_non_object_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError, match="arguments must be an object"):
            parse_arguments(ToolArguments, ["repo"])

    def test_error_names_the_field(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_arguments(LogArgs, {"limit": 500})

        assert exc_info.value.field == "limit"
        assert exc_info.value.message.startswith("Invalid argument 'limit':")


class TestPushArgs:
    def test_message_is_stripped(self) -> None:
        assert parse_arguments(PushArgs, {"message": "  feat: x \n"}).message == "feat: x"

    @pytest.mark.parametrize("arguments", [{}, {"message": ""}, {"message": "   "}])
    def test_message_required(self, arguments: dict[str, str]) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_arguments(PushArgs, arguments)

        assert exc_info.value.field == "message"


class TestSaveChangesArgs:
    def test_valid_change(self) -> None:
        args = parse_arguments(
            SaveChangesArgs, {"files": [" a.txt ", "b.txt"], "content": " fix A "}
        )

        assert args.require_change() == (["a.txt", "b.txt"], "fix A")
        assert args.is_listing is False

    def test_listing_form(self) -> None:
        args = parse_arguments(SaveChangesArgs, {"repo": "api"})

        assert args.is_listing is True
        assert args.limit == 1000

    def test_empty_files(self) -> None:
        args = parse_arguments(SaveChangesArgs, {"files": [], "content": "x"})

        with pytest.raises(InvalidArgumentError, match="non-empty array"):
            args.require_change()

    def test_blank_file_name(self) -> None:
        args = parse_arguments(SaveChangesArgs, {"files": ["a", "  "], "content": "x"})

        with pytest.raises(InvalidArgumentError, match="non-empty strings"):
            args.require_change()

    def test_blank_content(self) -> None:
        args = parse_arguments(SaveChangesArgs, {"files": ["a"], "content": "  "})

        with pytest.raises(InvalidArgumentError) as exc_info:
            args.require_change()

        assert exc_info.value.field == "content"

    def test_non_string_file_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_arguments(SaveChangesArgs, {"files": [1], "content": "x"})

        assert exc_info.value.field is not None
        assert exc_info.value.field.startswith("files")


class TestPagingArgs:
    def test_defaults(self) -> None:
        assert parse_arguments(PendingChangesArgs, {}).limit == 1000
        assert parse_arguments(OperationLogsArgs, {}).limit == 50

    @pytest.mark.parametrize(
        "arguments",
        [{"limit": 0}, {"limit": 1001}, {"offset": -1}],
    )
    def test_bounds(self, arguments: dict[str, int]) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_arguments(PendingChangesArgs, arguments)


class TestGitArgs:
    def test_add_defaults_to_everything(self) -> None:
        assert parse_arguments(AddArgs, {}).files == ["."]
        assert parse_arguments(AddArgs, {"files": []}).files == ["."]

    def test_add_accepts_single_string(self) -> None:
        assert parse_arguments(AddArgs, {"files": "src/app.py"}).files == ["src/app.py"]

    def test_diff_drops_blank_paths(self) -> None:
        args = parse_arguments(DiffArgs, {"files": ["a.py", ""], "staged": True})

        assert args.files == ["a.py"]
        assert args.staged is True

    def test_log_limit_capped_at_100(self) -> None:
        with pytest.raises(InvalidArgumentError):
            parse_arguments(LogArgs, {"limit": 101})

    def test_set_log_dir_requires_path(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_arguments(SetLogDirArgs, {"log_dir": "  "})

        assert exc_info.value.field == "log_dir"
