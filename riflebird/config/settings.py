# riflebird/config/settings.py
import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from riflebird.config.constants import DEFAULT_MAX_ITERATIONS
from riflebird.exceptions.config import ConfigError

logger = logging.getLogger("Settings")


class Settings(BaseSettings):
    # === Environment Variables (CLEAN NAMES) ===
    project_root: Path = Field(default_factory=Path.cwd)
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # AI provider
    llm_provider: str = "openai"
    ai_model: str = "gpt-4o-mini"
    ai_temperature: Optional[float] = 0.2
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    ollama_host: str = "http://localhost:11434"
    ollama_api_key: Optional[str] = None
    provider_max_retries: int = 3

    # Agentic loop
    max_iterations: int = DEFAULT_MAX_ITERATIONS

    # Subprocesses
    test_timeout_ms: int = 30000
    typecheck_timeout_ms: int = 60000
    typecheck_enabled: bool = True

    # Unit test writing
    healing_enabled: bool = True
    healing_max_retries: int = 3
    test_output_dir: Optional[str] = None
    unit_test_output_strategy: Optional[Literal["root", "colocated"]] = None
    concurrency: int = 1

    # === Pydantic V2 Configuration ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # NO prefix - clean names match exactly
        extra="ignore",
        case_sensitive=False,
    )

    # === Model Validator ===

    @model_validator(mode="after")
    def validate_and_compute(self) -> "Settings":
        """Validate and normalize derived fields."""

        # 1. Validate project root exists
        if not self.project_root.exists():
            raise ConfigError(
                f"Project root does not exist: {self.project_root}",
                field_name="project_root",
                invalid_value=str(self.project_root),
            )
        self.project_root = self.project_root.resolve()

        # 2. Validate log level
        if self.log_level.upper() not in logging._nameToLevel:
            raise ConfigError(
                f"Invalid log level: {self.log_level}",
                field_name="log_level",
                invalid_value=self.log_level,
            )
        self.log_level = self.log_level.upper()

        # 3. Validate provider selection
        normalized_provider = (self.llm_provider or "openai").strip().lower()
        if normalized_provider not in {"openai", "ollama"}:
            raise ConfigError(
                "Invalid llm_provider value. Expected 'openai' or 'ollama'. "
                f"Got: {self.llm_provider}",
                field_name="llm_provider",
                invalid_value=self.llm_provider,
            )
        self.llm_provider = normalized_provider

        # 4. Loop bounds
        if self.max_iterations < 1:
            raise ConfigError(
                "MAX_ITERATIONS must be at least 1.",
                field_name="max_iterations",
                invalid_value=self.max_iterations,
            )
        if self.healing_max_retries < 1:
            raise ConfigError(
                "HEALING_MAX_RETRIES must be at least 1.",
                field_name="healing_max_retries",
                invalid_value=self.healing_max_retries,
            )
        if self.concurrency < 1:
            raise ConfigError(
                "CONCURRENCY must be at least 1.",
                field_name="concurrency",
                invalid_value=self.concurrency,
            )

        return self

    # === Convenience Properties ===

    @property
    def provider_label(self) -> str:
        return f"{self.llm_provider}:{self.ai_model}"


def load_settings(**overrides) -> Settings:
    """Build Settings from the environment, letting CLI flags win."""
    cleaned = {k: v for k, v in overrides.items() if v is not None}
    settings = Settings(**cleaned)
    logger.debug("Settings loaded for provider %s", settings.provider_label)
    return settings
