# src/dealscope/adapters/config.py
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dealscope.domain.assumptions import AnalysisConfig


class AppConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # persistence
    DB_URI: str = Field(default="sqlite:///dealscope.db")
    # "memory" keeps API verdicts in-process; "sql" writes them to DB_URI
    VERDICT_STORE: Literal["memory", "sql"] = Field(default="memory")

    # Batch analysis
    BATCH_WORKERS: int = Field(default=1)

    # Flat analysis overrides, e.g.
    #   DEALSCOPE_ANALYSIS_OVERRIDES='{"arvMultiplier": 0.75, "hotMinSpread": 30000}'
    ANALYSIS_OVERRIDES: dict[str, Any] = Field(default_factory=dict)

    model_config = SettingsConfigDict(
        env_prefix="DEALSCOPE_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("BATCH_WORKERS", mode="before")
    @classmethod
    def _workers_positive(cls, v: Any) -> Any:
        n = int(v)
        if n < 1:
            raise ValueError("BATCH_WORKERS must be >= 1")
        return n

    def analysis_config(self, extra: dict[str, Any] | None = None) -> AnalysisConfig:
        """Snapshot of the analysis settings for one run (env overrides, then `extra`)."""
        merged = dict(self.ANALYSIS_OVERRIDES)
        if extra:
            merged.update(extra)
        return AnalysisConfig.from_mapping(merged)


config = AppConfig()
