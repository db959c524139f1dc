from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from finesse_trainer.domain.constants import MAX_SESSION_HISTORY

PracticeModeName = Literal[
    "learning",
    "all_random",
    "z_only",
    "s_only",
    "i_only",
    "t_only",
    "o_only",
    "l_only",
    "j_only",
    "free_stack",
]


class AppConfig(BaseSettings):
    """
    Configuration model for the finesse trainer.
    Supports loading from:
    1. Environment variables (FINESSE_*)
    2. Config file (~/.config/finesse-trainer/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="FINESSE_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".config/finesse-trainer")
    progress_file: Path | None = None

    # Scheduling
    review_policy: Literal["canonical", "lenient"] = "canonical"
    max_session_history: int = Field(default=MAX_SESSION_HISTORY, ge=1)
    seed: int | None = None
    mode: PracticeModeName = "learning"
    adaptive_introduction: bool = False

    # Flags
    retry_on_fault: bool = False
    master_mode: bool = False
    verbose: int = Field(default=0, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file; earlier sources win
        toml_file = next((f for f in _config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_dir(cls, v: Any) -> Path:
        return Path(v).expanduser()

    @field_validator("progress_file", mode="before")
    @classmethod
    def expand_progress_file(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser()


def _config_files() -> list[Path]:
    # Re-evaluated per call so a patched HOME is honoured
    return [
        Path.home() / ".config/finesse-trainer/config.toml",
        Path.home() / ".finesse-trainer.toml",
    ]


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/finesse-trainer/config.toml (if exists)
    3. Environment variables (FINESSE_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    config = AppConfig(**overrides)

    if config.progress_file is None:
        config.progress_file = config.data_dir / "progress.json"

    return config
