"""Configuration management for TaskPilot."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from taskpilot.exceptions import ConfigurationError


# Paths
DEFAULT_CONFIG_PATH = Path("~/.taskpilot/config.yaml").expanduser()
LOCAL_CONFIG_FILENAME = "config.yaml"

DEFAULT_SYSTEM_PROMPT = "You are a cute cat and will speak as such."

# Providers that cannot run without an API key.
_KEYED_PROVIDERS = {"openai", "chatgpt"}


class ModelConfig(BaseModel):
    """Remote completion model configuration."""

    provider: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float | None = None
    max_tokens: int = 50
    api_key: str = ""
    base_url: str = ""
    timeout: float = 30.0
    system_prompt: str = DEFAULT_SYSTEM_PROMPT


class TasksConfig(BaseModel):
    """Task orchestration configuration."""

    max_reevaluations: int = Field(default=3, ge=0)
    stop_on_sentinel: bool = False
    complex_indicator: str = "complex"


class UserConfig(BaseModel):
    """Identity used for the local console conversation."""

    id: str = "1234"


class UIConfig(BaseModel):
    """Console UI configuration."""

    reply_prefix: str = "Bot: "
    exit_command: str = "exit"
    paste_window_ms: int = 30


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"


class Config(BaseSettings):
    """Main configuration for TaskPilot."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    tasks: TasksConfig = Field(default_factory=TasksConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="TASKPILOT_",
        env_file=".env",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; environment variables win over them.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @classmethod
    def resolve_default_config_path(cls) -> Path:
        """Resolve default config path with local-first precedence."""
        local_path = Path.cwd() / LOCAL_CONFIG_FILENAME
        if local_path.exists():
            return local_path
        return DEFAULT_CONFIG_PATH

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from YAML file."""
        config_path = Path(path).expanduser() if path else cls.resolve_default_config_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration file {config_path}: {e}") from e

    @classmethod
    def load(cls) -> "Config":
        """Load configuration, preferring env vars over YAML."""
        return cls.from_yaml()

    def save(self, path: Path | str | None = None) -> None:
        """Save configuration to YAML file."""
        config_path = Path(path).expanduser() if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def missing_required_keys(self) -> list[str]:
        """Return dotted keys that are blank and have no usable default."""
        missing: list[str] = []
        provider = self.model.provider.strip().lower()
        if provider in _KEYED_PROVIDERS and not self.model.api_key.strip():
            missing.append("model.api_key")
        return missing

    def set_value(self, dotted_key: str, value: str) -> None:
        """Assign a value addressed by a dotted key such as ``model.api_key``."""
        section_name, _, field_name = dotted_key.partition(".")
        section = getattr(self, section_name, None)
        if section is None or not field_name or not hasattr(section, field_name):
            raise KeyError(dotted_key)
        setattr(section, field_name, value)


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
