"""Repository routing.

Resolves the optional ``repo`` argument of a tool call to a
RepositoryContext. The strategy is fixed at startup: a single implicit
context, or a table of named contexts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from gitgate.exceptions import ConfigError, InvalidArgumentError, RepositoryNotFoundError
from gitgate.models import RepositoryContext

__all__ = [
    "MultiRepositoryRouter",
    "RepositoryRouter",
    "SingleRepositoryRouter",
]


class RepositoryRouter(ABC):
    """Maps caller-supplied repository names to contexts.

    Lookups are pure: they never mutate router state.
    """

    @property
    @abstractmethod
    def is_multi_instance(self) -> bool:
        """True when callers must name the repository they address."""

    @property
    @abstractmethod
    def contexts(self) -> tuple[RepositoryContext, ...]:
        """All contexts, in configuration order."""

    @abstractmethod
    def resolve(self, name: str | None) -> RepositoryContext:
        """Resolve an optional repository name to a context.

        Raises:
            InvalidArgumentError: If a name is required but missing.
            RepositoryNotFoundError: If no context has the given name.
        """

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(ctx.repo_name for ctx in self.contexts)


class SingleRepositoryRouter(RepositoryRouter):
    """Router for one implicit context; the requested name is ignored."""

    def __init__(self, context: RepositoryContext) -> None:
        self._context = context

    @property
    def is_multi_instance(self) -> bool:
        return False

    @property
    def contexts(self) -> tuple[RepositoryContext, ...]:
        return (self._context,)

    def resolve(self, name: str | None) -> RepositoryContext:
        return self._context


class MultiRepositoryRouter(RepositoryRouter):
    """Router over an immutable table of uniquely named contexts."""

    def __init__(self, contexts: Iterable[RepositoryContext]) -> None:
        table: dict[str, RepositoryContext] = {}
        for ctx in contexts:
            if not ctx.name:
                raise ConfigError("Repository contexts need a name", field="name")
            if ctx.name in table:
                raise ConfigError(
                    f"Duplicate repository name: {ctx.name}",
                    field="name",
                    value=ctx.name,
                )
            table[ctx.name] = ctx
        if not table:
            raise ConfigError("At least one repository must be configured")
        self._table: Mapping[str, RepositoryContext] = MappingProxyType(table)

    @property
    def is_multi_instance(self) -> bool:
        return True

    @property
    def contexts(self) -> tuple[RepositoryContext, ...]:
        return tuple(self._table.values())

    def resolve(self, name: str | None) -> RepositoryContext:
        if not name:
            raise InvalidArgumentError(
                "repo parameter is required. Available values: "
                + ", ".join(self._table),
                field="repo",
            )
        try:
            return self._table[name]
        except KeyError:
            raise RepositoryNotFoundError(name, tuple(self._table)) from None
