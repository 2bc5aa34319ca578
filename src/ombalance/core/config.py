"""
Configuration system with validation and environment awareness.
Based on Pydantic Settings for robust configuration management.
"""
from pathlib import Path
import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Literal, Union

from ombalance.core.constants import CALCULATOR_VERSION, DEFAULT_BATCH_SIZE


class BalanceConfig(BaseSettings):
    """Configuration for the organic matter balance calculation"""

    batch_size: int = Field(
        DEFAULT_BATCH_SIZE, gt=0,
        description="Fields evaluated concurrently per batch"
    )
    calculator_version: str = Field(
        CALCULATOR_VERSION,
        description="Version tag mixed into calculation cache keys"
    )

    model_config = SettingsConfigDict(env_prefix="OMBALANCE_BALANCE_", case_sensitive=False)


class CacheConfig(BaseSettings):
    """Configuration for the calculation cache"""

    enabled: bool = Field(True, description="Cache field-level results")
    max_entries: int = Field(10_000, gt=0, description="Maximum cached results kept in memory")

    model_config = SettingsConfigDict(env_prefix="OMBALANCE_CACHE_", case_sensitive=False)


class LoggingConfig(BaseSettings):
    """Configuration for logging"""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    date_format: str = Field("%Y-%m-%d %H:%M:%S")

    model_config = SettingsConfigDict(env_prefix="OMBALANCE_LOGGING_", case_sensitive=False)


class OMBalanceConfig(BaseSettings):
    """Main configuration for the organic matter balance engine"""

    # System
    project_name: str = "ombalance"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False

    # Component configurations
    balance: BalanceConfig = Field(default_factory=BalanceConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="OMBALANCE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_config(self):
        """Cross-field validation"""
        if self.environment == "production" and self.debug:
            raise ValueError("Debug mode cannot be enabled in production")
        return self

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "OMBalanceConfig":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}

        return cls(**yaml_config)

    def to_yaml(self, yaml_path: Union[str, Path]):
        """Save configuration to YAML file"""
        yaml_path = Path(yaml_path)
        yaml_path.parent.mkdir(parents=True, exist_ok=True)

        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)


# USAGE: Environment variables override defaults
# export OMBALANCE_BALANCE__BATCH_SIZE=25
# export OMBALANCE_LOGGING__LOG_LEVEL=DEBUG
_config: Optional[OMBalanceConfig] = None


def get_config(config_path: Optional[Path] = None) -> OMBalanceConfig:
    """Get or create configuration instance (singleton pattern)"""
    global _config

    if _config is None:
        if config_path and config_path.exists():
            _config = OMBalanceConfig.from_yaml(config_path)
        else:
            _config = OMBalanceConfig()

    return _config


def set_config(config: Optional[OMBalanceConfig]):
    """Set configuration (useful for testing); None resets to defaults"""
    global _config
    _config = config
