from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    """Configuration-related error."""
    pass


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = (
        "%(asctime)-20s %(name)-30s "
        "%(levelname)-8s: %(message)s"
    )


class AllocatorSettings(BaseModel):
    max_id: int = Field(
        2**32 - 1,
        description=(
            "Highest identifier an allocator may mint, per namespace. "
            "Recycled identifiers are still handed out once this is reached."
        ),
    )


class AlgebraSettings(BaseModel):
    """
    Labels and weights given to edges that graph operations mint themselves.

    Copied edges normally inherit label and weight from the edge they copy;
    the copied_* defaults apply only when no source edge can be found.
    """

    copied_edge_label: str = Field(
        "copied_edge", description="Fallback label for structurally copied edges."
    )
    copied_edge_weight: int = Field(
        0, description="Fallback weight for structurally copied edges."
    )

    complement_edge_label: str = Field(
        "complemented_edge", description="Label of edges created by complement()."
    )
    complement_edge_weight: int = Field(
        0, description="Weight of edges created by complement()."
    )

    series_edge_label: str = Field(
        "series_composition_edge", description="Label of series bridging edges."
    )
    series_edge_weight: int = Field(
        0, description="Weight of series bridging edges."
    )

    product_edge_label: str = Field(
        "cartesian_product_edge", description="Label of inter-layer product edges."
    )
    product_edge_weight: int = Field(
        0, description="Weight of inter-layer product edges."
    )

    duplicate_label_prefix: str = Field(
        "duplicated_node_",
        description="Prefix used when renaming nodes whose label collides.",
    )


class TextFormatSettings(BaseModel):
    encoding: str = Field("utf-8", description="Encoding of graph description files.")
    separator: str = Field(
        "->", description="Token separating a node header from its edge list."
    )


class DatabaseSettings(BaseModel):
    """
    DB config as a SQLAlchemy URL.

    In production, override via:
    - env var:     QUIVER_DATABASE__URL
    - dotenv:      .env / .env.local
    - secret file: /run/secrets/quiver/database__url
    """
    url: str = Field(
        "sqlite+pysqlite:///:memory:",
        description="SQLAlchemy-style database URL.",
    )
    echo: bool = False


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class AppSettings(BaseSettings):
    """
    Canonical configuration for quiver.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides)
    2. Environment variables
    3. .env and .env.local
    4. Secret files in /run/secrets/quiver
    5. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="QUIVER_",  # QUIVER_LOGGING__LEVEL, QUIVER_DATABASE__URL, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        secrets_dir="/run/secrets/quiver",
        extra="ignore",
        validate_default=True,
    )

    app_name: str = "quiver"
    debug: bool = False

    logging: LoggingSettings = LoggingSettings()
    allocator: AllocatorSettings = AllocatorSettings()  # type: ignore[call-arg]
    algebra: AlgebraSettings = AlgebraSettings()  # type: ignore[call-arg]
    text: TextFormatSettings = TextFormatSettings()  # type: ignore[call-arg]
    database: DatabaseSettings = DatabaseSettings()  # type: ignore[call-arg]

    def validate_allocator(self) -> None:
        """Ensure the identifier ceiling leaves room for at least one id."""
        if self.allocator.max_id < 1:
            raise ConfigError(
                f"allocator.max_id must be >= 1, got {self.allocator.max_id}"
            )


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    settings = AppSettings(**overrides)
    settings.validate_allocator()
    return settings
