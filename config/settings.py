"""
Configuration settings for the tool provisioner.
"""

from typing import Optional, List
from pathlib import Path
from pydantic import BaseModel, Field, validator
from pydantic_settings import BaseSettings

from provisioner.catalog import NODEJS_METHODS, default_tools
from provisioner.core.preflight import DEFAULT_PREREQUISITES
from provisioner.models.tool import ToolSpec


class NetworkConfig(BaseModel):
    """Timeouts and retry policy for network-bound work."""
    metadata_timeout: float = Field(default=30.0, description="Version metadata query timeout in seconds")
    download_timeout: float = Field(default=300.0, description="Artifact download timeout in seconds")
    command_timeout: float = Field(default=900.0, description="Installer command timeout in seconds")
    retry_attempts: int = Field(default=1, ge=0, le=3, description="Retries after a failed network call")
    retry_delay_seconds: float = Field(default=2.0, ge=0, description="Backoff before the first retry")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default="INFO", description="Logging level")
    file_path: Optional[Path] = Field(default=None, description="Log file; disabled when unset")
    timestamped: bool = Field(default=True, description="Add the run timestamp to the log file name")
    max_file_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(default=5, description="Number of log backups to keep")

    @validator('level')
    def validate_level(cls, v):
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()


class PreflightConfig(BaseModel):
    """Environment checks made before any tool is processed."""
    enabled: bool = Field(default=True, description="Run the checks at all")
    supported_os: List[str] = Field(default_factory=lambda: ["ubuntu"], description="Accepted os-release IDs")
    min_os_version: Optional[str] = Field(default="22.04", description="Older releases only log a warning")
    allow_root: bool = Field(default=False, description="Permit provisioning as root")
    prerequisites: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PREREQUISITES),
        description="apt packages installed when missing"
    )


class Settings(BaseSettings):
    """Main application settings."""
    tools: List[ToolSpec] = Field(default_factory=default_tools, description="Tools in processing order")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    preflight: PreflightConfig = Field(default_factory=PreflightConfig)

    # Operational settings
    channel: Optional[str] = Field(default=None, description="Channel overriding the own channel of tools offering it")
    force_reinstall: bool = Field(default=False, description="Reinstall tools that are already current")
    continue_on_error: bool = Field(default=False, description="Keep going after a required tool fails")
    dry_run: bool = Field(default=False, description="Plan only")
    nodejs_method: Optional[str] = Field(default=None, description="Node.js install method: nodesource or nvm")

    class Config:
        env_prefix = "PROVISION_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Ignore extra fields from environment

    @validator('nodejs_method')
    def validate_nodejs_method(cls, v):
        if v is not None and v not in NODEJS_METHODS:
            raise ValueError(f"Unknown Node.js install method: {v}")
        return v

    @validator('tools')
    def validate_unique_names(cls, v):
        names = [tool.name for tool in v]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate tool names: {', '.join(duplicates)}")
        return v
