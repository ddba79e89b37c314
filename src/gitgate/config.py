from __future__ import annotations

from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gitgate.constants import (
    DEFAULT_LOG_DIR,
    DEFAULT_PUSH_FLAGS,
    DEFAULT_REMOTE,
    PULL_TIMEOUT,
    PUSH_TIMEOUT,
    READ_TIMEOUT,
    STAGE_TIMEOUT,
)
from gitgate.exceptions import ConfigError
from gitgate.logging import get_logger
from gitgate.models import RepositoryContext

__all__ = [
    "GitGateConfig",
    "TimeoutConfig",
    "load_config",
    "get_user_config_path",
]

logger = get_logger(__name__)

_PROXY_VARS: tuple[str, ...] = (
    "http_proxy",
    "https_proxy",
    "no_proxy",
    "all_proxy",
    "socks_proxy",
)


class TimeoutConfig(BaseModel):
    """Subprocess timeouts in seconds.

    Attributes:
        read: status, diff, log, add and commit.
        stage: the automatic ``git add .`` before a push.
        push: the final ``git push``.
        pull: ``git pull``.
    """

    read: float = Field(default=READ_TIMEOUT, gt=0)
    stage: float = Field(default=STAGE_TIMEOUT, gt=0)
    push: float = Field(default=PUSH_TIMEOUT, gt=0)
    pull: float = Field(default=PULL_TIMEOUT, gt=0)


class YamlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
                    if loaded is None:
                        logger.warning("config_file_empty", path=str(yaml_file))
                    elif isinstance(loaded, dict):
                        self._config_data = loaded
                    else:
                        raise ConfigError(
                            message=f"Config file {yaml_file} must contain a mapping",
                            field=None,
                            value=type(loaded).__name__,
                        )
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return self._config_data


def _proxy_field(name: str) -> Any:
    upper = name.upper()
    return Field(
        default=None,
        validation_alias=AliasChoices(name, f"GITGATE_{upper}", upper),
    )


class GitGateConfig(BaseSettings):
    """Root configuration for one gitgate process.

    Single-instance mode uses the top-level repository fields; setting
    ``multi_instance`` switches to a table of named repositories and the
    top-level repository fields are ignored.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITGATE_",
        env_nested_delimiter="__",
        extra="ignore",
        populate_by_name=True,
    )

    # Single-instance repository
    project_path: Path | None = None
    repo_name: str | None = None
    remote_name: str = DEFAULT_REMOTE
    local_branch: str | None = None
    remote_branch: str | None = None
    pull_source_branch: str | None = None
    push_flags: str = DEFAULT_PUSH_FLAGS
    language: str = "en"

    # Multi-instance repositories
    multi_instance: list[RepositoryContext] = Field(default_factory=list)

    # Tool naming and persistence
    tool_prefix: str = ""
    log_dir: Path | None = None

    # Subprocess behaviour
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    push_retries: int = Field(default=0, ge=0, le=5)

    # Proxies injected into the git environment
    http_proxy: str | None = _proxy_field("http_proxy")
    https_proxy: str | None = _proxy_field("https_proxy")
    no_proxy: str | None = _proxy_field("no_proxy")
    all_proxy: str | None = _proxy_field("all_proxy")
    socks_proxy: str | None = _proxy_field("socks_proxy")

    @field_validator("tool_prefix")
    @classmethod
    def _strip_prefix(cls, v: str) -> str:
        return v.strip().rstrip("_")

    @model_validator(mode="after")
    def check_repositories(self) -> Self:
        if self.multi_instance:
            seen: set[str] = set()
            for ctx in self.multi_instance:
                if not ctx.name:
                    raise ValueError("every multi_instance entry needs a name")
                if ctx.name in seen:
                    raise ValueError(
                        f"duplicate repository name in multi_instance: {ctx.name}"
                    )
                seen.add(ctx.name)
            return self

        missing = [
            name
            for name in ("project_path", "local_branch", "remote_branch")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"single-instance mode requires {', '.join(missing)} "
                "(or configure multi_instance)"
            )
        if self.project_path is not None and not self.project_path.exists():
            logger.warning(
                "project_path_missing",
                project_path=str(self.project_path),
            )
        return self

    @property
    def is_multi_instance(self) -> bool:
        return bool(self.multi_instance)

    @property
    def log_dir_configured(self) -> bool:
        """True when the journal directory is fixed at startup.

        Single-instance mode always has one, through its ``.setting`` default.
        """
        return self.log_dir is not None or not self.is_multi_instance

    def single_context(self) -> RepositoryContext:
        """Build the implicit repository context of single-instance mode."""
        if self.project_path is None:
            raise ConfigError(
                "Single-instance mode requires a project path", field="project_path"
            )
        return RepositoryContext(
            name=self.repo_name,
            working_directory=self.project_path,
            remote_name=self.remote_name,
            local_branch=self.local_branch or "",
            remote_branch=self.remote_branch or "",
            pull_source_branch=self.pull_source_branch,
            push_flags=self.push_flags,
            language=self.language,
        )

    def effective_log_dir(self) -> Path | None:
        """Directory the journal persists to at startup.

        Single-instance mode falls back to ``.setting`` (or
        ``.setting.<repo_name>``); multi-instance mode persists nothing until
        a directory is configured or chosen with ``set_log_dir``.
        """
        if self.log_dir is not None:
            return self.log_dir
        if self.is_multi_instance:
            return None
        suffix = f".{self.repo_name}" if self.repo_name else ""
        return Path(f"{DEFAULT_LOG_DIR}{suffix}")

    def proxy_env(self) -> dict[str, str]:
        """Proxy variables for the git environment, in both letter cases."""
        env: dict[str, str] = {}
        for name in _PROXY_VARS:
            value = getattr(self, name)
            if value:
                env[name.upper()] = value
                env[name] = value
        return env

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Init settings (explicit keyword arguments)
        2. Environment variables (GITGATE_*, plus standard proxy variables)
        3. Project YAML config (./gitgate.yaml or the --config path)
        4. User YAML config (~/.config/gitgate/config.yaml)
        """
        project_config_path = _config_path_override or Path.cwd() / "gitgate.yaml"
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


# Set by load_config() for the duration of one GitGateConfig construction
_config_path_override: Path | None = None


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/gitgate/config.yaml
    """
    return Path.home() / ".config" / "gitgate" / "config.yaml"


def load_config(config_path: Path | None = None, **overrides: Any) -> GitGateConfig:
    """Load configuration with hierarchy: user -> project -> env -> overrides.

    Args:
        config_path: Optional path to project config file. Defaults to
            ./gitgate.yaml.
        **overrides: Field values taking precedence over every other source.

    Returns:
        GitGateConfig instance with merged configuration.

    Raises:
        ConfigError: If configuration is invalid.
    """
    global _config_path_override

    if config_path is not None and not config_path.exists():
        raise ConfigError(
            f"Config file not found: {config_path}",
            field="config",
            value=str(config_path),
        )

    _config_path_override = config_path
    try:
        return GitGateConfig(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"]) or None
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
    finally:
        _config_path_override = None
