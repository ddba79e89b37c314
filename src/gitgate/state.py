"""Application state owned by the RPC dispatcher.

One :class:`ContextState` exists per repository context, bundling its journal,
review gate and git facade. In single-instance mode the sole context's journal
doubles as the server journal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gitgate.config import GitGateConfig
from gitgate.constants import DEFAULT_PROTOCOL_VERSION, MULTI_SERVER_NAME, SERVER_NAME
from gitgate.git import GitRepository
from gitgate.journal import JournalStore
from gitgate.logging import get_logger
from gitgate.models import RepositoryContext
from gitgate.review import ReviewGate
from gitgate.router import (
    MultiRepositoryRouter,
    RepositoryRouter,
    SingleRepositoryRouter,
)
from gitgate.runners import CommandRunner, StreamLine

__all__ = ["AppState", "ContextState", "build_state"]

logger = get_logger(__name__)


def _log_git_line(line: StreamLine) -> None:
    logger.debug("git_output", stream=line.stream, line=line.content)


@dataclass
class ContextState:
    """Mutable state of one repository context."""

    context: RepositoryContext
    journal: JournalStore
    gate: ReviewGate
    git: GitRepository

    @property
    def pending_count(self) -> int:
        return len(self.journal.pending_changes)


@dataclass
class AppState:
    """Everything a request handler may read or mutate.

    Attributes:
        config: Loaded configuration.
        router: Repository resolution strategy.
        contexts: Context states keyed by context name (None in single mode).
        server_journal: Journal for exchanges not scoped to a repository.
        log_dir: Current log directory, None while persistence is disabled.
        log_dir_configured: True when the log directory was fixed at startup.
    """

    config: GitGateConfig
    router: RepositoryRouter
    contexts: dict[str | None, ContextState]
    server_journal: JournalStore
    log_dir: Path | None = None
    log_dir_configured: bool = False
    initialized: bool = False
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
    client_info: dict[str, Any] = field(default_factory=dict)
    client_capabilities: dict[str, Any] = field(default_factory=dict)

    @property
    def is_multi_instance(self) -> bool:
        return self.router.is_multi_instance

    @property
    def server_name(self) -> str:
        return MULTI_SERVER_NAME if self.is_multi_instance else SERVER_NAME

    @property
    def tool_prefix(self) -> str:
        return self.config.tool_prefix

    def resolve(self, repo: str | None) -> ContextState:
        """Resolve a caller-supplied repository name to its state.

        Raises:
            InvalidArgumentError: If multi-instance mode and ``repo`` is missing.
            RepositoryNotFoundError: If ``repo`` names no configured context.
        """
        context = self.router.resolve(repo)
        return self.contexts[context.name if self.is_multi_instance else None]

    def journals(self) -> list[JournalStore]:
        """Every distinct journal, server journal first."""
        stores = [self.server_journal]
        for state in self.contexts.values():
            if state.journal is not self.server_journal:
                stores.append(state.journal)
        return stores

    def set_log_dir(self, directory: Path) -> Path:
        """Resolve and create ``directory`` and persist every journal there."""
        resolved = directory.expanduser().resolve()
        resolved.mkdir(parents=True, exist_ok=True)
        for journal in self.journals():
            journal.relocate(resolved)
        self.log_dir = resolved
        logger.info("log_dir_set", log_dir=str(resolved))
        return resolved


def _context_state(
    config: GitGateConfig,
    context: RepositoryContext,
    journal: JournalStore,
    env: dict[str, str],
) -> ContextState:
    runner = CommandRunner(
        cwd=context.working_directory,
        timeout=config.timeouts.read,
        env=env,
        on_line=_log_git_line,
    )
    return ContextState(
        context=context,
        journal=journal,
        gate=ReviewGate(context.name),
        git=GitRepository(
            context=context,
            runner=runner,
            timeouts=config.timeouts,
            push_retries=config.push_retries,
        ),
    )


def build_state(config: GitGateConfig) -> AppState:
    """Build the router, journals and gates described by ``config``.

    Journals found in the log directory are loaded; corrupt files are logged
    and start empty.

    Raises:
        ConfigError: If the repository table is invalid.
    """
    log_dir = config.effective_log_dir()
    if log_dir is not None:
        log_dir = log_dir.expanduser().resolve()
    env = config.proxy_env()
    prefix = config.tool_prefix

    router: RepositoryRouter
    contexts: dict[str | None, ContextState] = {}
    if config.is_multi_instance:
        router = MultiRepositoryRouter(config.multi_instance)
        server_journal = JournalStore(directory=log_dir, tool_prefix=prefix)
        for context in router.contexts:
            journal = JournalStore(context.name, directory=log_dir, tool_prefix=prefix)
            contexts[context.name] = _context_state(config, context, journal, env)
        if log_dir is None:
            logger.warning(
                "journal_persistence_disabled",
                reason="no log_dir configured; call set_log_dir to persist",
            )
    else:
        context = config.single_context()
        router = SingleRepositoryRouter(context)
        server_journal = JournalStore(directory=log_dir, tool_prefix=prefix)
        contexts[None] = _context_state(config, context, server_journal, env)

    state = AppState(
        config=config,
        router=router,
        contexts=contexts,
        server_journal=server_journal,
        log_dir=log_dir,
        log_dir_configured=config.log_dir_configured,
    )
    for journal in state.journals():
        journal.load()
    logger.info(
        "state_built",
        mode="multi" if config.is_multi_instance else "single",
        repositories=list(router.names),
        log_dir=str(log_dir) if log_dir else None,
    )
    return state
