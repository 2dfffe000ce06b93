"""Configuration Manager for the intake client."""
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.validation import MAX_IMAGE_BYTES


class ConfigManager(BaseSettings):
    """Manages client configuration settings using Pydantic BaseSettings."""

    # API settings
    api_base_url: str = 'http://localhost:5000'
    api_timeout: float = 60.0  # seconds; uploads of five photos can be slow

    # Image settings
    preview_max_size: int = 200  # Maximum preview dimension in pixels
    max_image_bytes: int = MAX_IMAGE_BYTES

    model_config = SettingsConfigDict(env_prefix='INTAKE_CLIENT_', case_sensitive=False)

    def get(self, key, default=None):
        """Get a configuration value."""
        return getattr(self, key, default)

    def get_all(self):
        """Get all configuration values as dictionary."""
        return self.model_dump()
