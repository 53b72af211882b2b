from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentVariables(BaseSettings):
    """Values needed before ``config.yaml`` can be located and loaded.

    Everything else is configured through the YAML file, whose placeholders
    read the environment themselves.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    app_environment: Literal["development", "production", "test"] = Field(
        default="development"
    )
    app_config_file: str = Field(
        default="config.yaml", description="Path of the YAML configuration file"
    )
