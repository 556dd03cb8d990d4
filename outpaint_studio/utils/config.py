"""Configuration management for the outpaint studio."""

import os
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, ConfigDict, Field
from dotenv import load_dotenv

from .errors import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

DEFAULT_SETTINGS_PATH = Path("config/settings.yaml")

DEFAULT_OUTPAINTING_PROMPT = (
    "Extend this photograph to fill the entire frame. The black areas are empty "
    "canvas: replace them with new content that continues the scene naturally. "
    "Keep the existing photo in the center exactly as it is, and match its "
    "lighting, perspective, colors and level of detail so the result reads as "
    "one seamless, uncropped photograph with no visible borders or seams."
)

DEFAULT_EDIT_PREFIX = (
    "Edit only the area marked with red strokes, leave everything else in the "
    "image unchanged and remove the red marks. Requested change"
)

DEFAULT_ANALYSIS_PROMPT = (
    "Describe this image in two or three sentences for an artist who has to "
    "extend it beyond its borders: subject, setting, lighting, color palette "
    "and photographic style. Output the description only."
)


class PromptsConfig(BaseModel):
    """Prompt texts sent to the remote models."""
    outpainting_base: str = DEFAULT_OUTPAINTING_PROMPT
    edit_prefix: str = DEFAULT_EDIT_PREFIX
    analysis: str = DEFAULT_ANALYSIS_PROMPT


class Config(BaseModel):
    """Main application configuration."""

    # API Keys
    wavespeed_api_key: str = Field(default="", alias="WAVESPEED_API_KEY")
    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")

    # Application Settings
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Models
    generation_model: str = Field(default="google/nano-banana/edit", alias="GENERATION_MODEL")
    vision_model: str = Field(default="google/gemini-2.5-flash", alias="VISION_MODEL")

    # Timeout Settings
    timeout_wavespeed_seconds: float = Field(default=120.0, alias="TIMEOUT_WAVESPEED_SECONDS")
    timeout_wavespeed_polling_seconds: int = Field(default=180, alias="TIMEOUT_WAVESPEED_POLLING_SECONDS")
    timeout_openrouter_seconds: float = Field(default=60.0, alias="TIMEOUT_OPENROUTER_SECONDS")

    # Sessions and uploads
    max_upload_mb: float = Field(default=20.0, alias="MAX_UPLOAD_MB")
    session_ttl_seconds: int = Field(default=3600, alias="SESSION_TTL_SECONDS")
    analysis_enabled: bool = Field(default=True, alias="ANALYSIS_ENABLED")

    prompts: PromptsConfig = Field(default_factory=PromptsConfig)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)


# Global config instance
_config: Optional[Config] = None


def load_config(settings_path: Optional[Path] = None) -> Config:
    """
    Load configuration from environment and the optional YAML settings file.

    Environment variables win over YAML values for the same key.

    Args:
        settings_path: YAML file to read (defaults to config/settings.yaml)

    Returns:
        Config instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config

    path = settings_path or DEFAULT_SETTINGS_PATH

    try:
        yaml_config = {}
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        else:
            logger.warning(f"Settings file not found at {path}, using defaults")

        known = {field.alias for field in Config.model_fields.values() if field.alias}
        env_config = {key: value for key, value in os.environ.items() if key in known}

        config_data = {
            **yaml_config,
            **env_config,
        }

        _config = Config(**config_data)

        logger.info(
            "Configuration loaded successfully",
            extra={
                "environment": _config.app_env,
                "generation_model": _config.generation_model,
                "analysis_enabled": _config.analysis_enabled,
            }
        )

        return _config

    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}")


def get_config() -> Config:
    """
    Get the current configuration instance.

    Raises:
        ConfigurationError: If config not loaded
    """
    if _config is None:
        raise ConfigurationError("Configuration not loaded. Call load_config() first.")
    return _config
