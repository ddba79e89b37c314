from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from click.testing import CliRunner

# Register fixture plugins from tests/fixtures/
pytest_plugins = [
    "tests.fixtures.state",
]

_ISOLATED_PREFIXES: tuple[str, ...] = ("GITGATE_",)
_PROXY_VARS: tuple[str, ...] = (
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "NO_PROXY",
    "ALL_PROXY",
    "SOCKS_PROXY",
)


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for test environment.

    Logs go to stderr at WARNING level so they never mix with the JSON-RPC
    stream on stdout.
    """
    from gitgate.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture(autouse=True)
def isolated_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[Path, None, None]:
    """Keep the developer's environment and config files out of the tests.

    Removes GITGATE_* and proxy variables, points the user config file into
    the temporary directory and runs each test from a fresh working directory.
    """
    for key in list(os.environ):
        upper = key.upper()
        if upper.startswith(_ISOLATED_PREFIXES) or upper in _PROXY_VARS:
            monkeypatch.delenv(key, raising=False)

    user_config = tmp_path / "home" / ".config" / "gitgate" / "config.yaml"
    monkeypatch.setattr("gitgate.config.get_user_config_path", lambda: user_config)

    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    yield workdir


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner.

    Example:
        >>> def test_version(cli_runner):
        ...     from gitgate.main import cli
        ...     result = cli_runner.invoke(cli, ["--version"])
        ...     assert result.exit_code == 0
    """
    from click.testing import CliRunner

    return CliRunner()
