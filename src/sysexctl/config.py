"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field, field_serializer

from .persistence import PydanticPersistence

APP_DIR = Path.home() / ".sysexctl"
DEFAULT_CONFIG_PATH = APP_DIR / "config.json"
DEFAULT_LOG_DIR = APP_DIR / "logs"


class AppConfig(BaseModel):
    """Application configuration and settings."""

    # MIDI exchange
    query_timeout_ms: int = Field(
        default=500,
        ge=10,
        le=60_000,
        description="How long to collect replies after sending a query (milliseconds)",
    )
    client_name: str = Field(
        default="sysexctl",
        min_length=1,
        description="Client name shown to other MIDI applications",
    )

    # Schemas
    schema_dirs: list[Path] = Field(
        default_factory=list,
        description="Extra directories searched for *.json device schemas",
    )

    @field_serializer("schema_dirs")
    def serialize_paths(self, paths: list[Path]) -> list[str]:
        """Serialize Paths to strings."""
        return [str(p) for p in paths]

    @property
    def query_timeout(self) -> float:
        """Query timeout in seconds."""
        return self.query_timeout_ms / 1000

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.sysexctl/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        if path is None:
            path = DEFAULT_CONFIG_PATH
        return PydanticPersistence.load_json_or_default(path, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        if path is None:
            path = DEFAULT_CONFIG_PATH
        PydanticPersistence.save_json(self, path)
