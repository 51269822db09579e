"""
Server configuration for zmachine-api.

Loads settings from the [tool.zmachine_api] table of pyproject.toml, with
environment variables taking precedence. PORT and DEFAULT_GAME are honoured
without a prefix so existing deployments keep working; everything else uses
the ZMACHINE_ prefix (e.g. ZMACHINE_INTERPRETER_BACKEND=frotz).
"""

import tomllib
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

STORY_EXTENSIONS = (".z1", ".z2", ".z3", ".z4", ".z5", ".z6", ".z7", ".z8", ".zip")


class ServerConfiguration(BaseSettings):
    """
    Typed configuration for the game server and its interpreter backends.

    Every field has a default, so the server runs with no pyproject.toml at all.
    """

    # HTTP
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("ZMACHINE_PORT", "PORT", "port"),
        description="Listening port",
    )

    # Games
    default_game: str = Field(
        default="games/zork1.zip",
        validation_alias=AliasChoices(
            "ZMACHINE_DEFAULT_GAME", "DEFAULT_GAME", "default_game"
        ),
        description="Story file used when a session request names none",
    )
    games_dir: str = Field(
        default="games", description="Directory listed by GET /api/games"
    )

    # Interpreter selection
    interpreter_backend: Literal["jericho", "frotz", "scripted"] = Field(
        default="jericho", description="Adapter variant used for new sessions"
    )
    jericho_seed: Optional[int] = Field(
        default=None, description="Random seed passed to Jericho's FrotzEnv"
    )

    # dfrotz subprocess backend
    frotz_command: str = Field(default="dfrotz", description="Interpreter executable")
    frotz_args: List[str] = Field(
        default_factory=lambda: ["-p", "-m", "-x"],
        description="Arguments placed before the story path",
    )
    frotz_working_directory: Optional[str] = Field(
        default=None, description="Working directory for interpreter processes"
    )
    startup_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for the story banner"
    )
    command_timeout: float = Field(
        default=5.0, gt=0, description="Watchdog for a single command, in seconds"
    )
    idle_timeout: float = Field(
        default=0.1, gt=0, description="Quiet period that ends a turn, in seconds"
    )
    startup_markers: List[str] = Field(
        default_factory=lambda: [">", "ZORK"],
        description="Text showing the story finished booting",
    )

    # Session lifecycle
    max_sessions: int = Field(
        default=100, ge=1, description="Live sessions kept before LRU eviction"
    )
    session_idle_timeout: float = Field(
        default=1800.0, gt=0, description="Seconds before an idle session is evicted"
    )
    eviction_interval: float = Field(
        default=60.0, gt=0, description="Seconds between idle eviction sweeps"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level")
    json_log_file: Optional[str] = Field(
        default=None, description="Optional JSON-lines log file"
    )

    model_config = SettingsConfigDict(
        env_prefix="ZMACHINE_",
        env_file=None,  # load_dotenv() in from_toml() populates os.environ instead
        case_sensitive=False,
        populate_by_name=True,
        extra="forbid",  # Catch typos in config early
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values read from pyproject.toml
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @model_validator(mode="after")
    def validate_timeouts(self) -> "ServerConfiguration":
        """The idle window must fit inside the command watchdog."""
        if self.idle_timeout >= self.command_timeout:
            raise ValueError(
                f"idle_timeout ({self.idle_timeout}) must be < "
                f"command_timeout ({self.command_timeout})"
            )
        return self

    @property
    def games_path(self) -> Path:
        return Path(self.games_dir).expanduser().resolve()

    @classmethod
    def from_toml(cls, config_file: Optional[Path] = None) -> "ServerConfiguration":
        """
        Create a ServerConfiguration from pyproject.toml plus the environment.

        Args:
            config_file: Path to TOML file (defaults to pyproject.toml)

        Returns:
            ServerConfiguration instance; defaults are used for anything the
            file (or a missing file) does not set
        """
        # Load .env file if it exists to populate environment variables
        load_dotenv()

        config_file = config_file or Path("pyproject.toml")
        section = {}
        if config_file.exists():
            with open(config_file, "rb") as f:
                toml_data = tomllib.load(f)
            section = toml_data.get("tool", {}).get("zmachine_api", {})

        return cls(**section)


_configuration: Optional[ServerConfiguration] = None


def get_config() -> ServerConfiguration:
    """Get the process-wide configuration, loading it on first use."""
    global _configuration
    if _configuration is None:
        _configuration = ServerConfiguration.from_toml()
    return _configuration
