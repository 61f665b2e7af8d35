"""
Configuration system for schemarecon using Pydantic.
"""

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, ConfigDict
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError
from .store.dialect import STANDARD_TO_PGSQL, Dialect
from .schema.tree import DELETED_STATUS


class TypeMapConfig(BaseModel):
    """Type name map from Standard SQL to the PostgreSQL dialect."""

    standard_to_pgsql: Dict[str, str] = Field(
        default_factory=lambda: dict(STANDARD_TO_PGSQL),
        description="Standard-SQL type name to PostgreSQL type name",
    )


class ExplorerConfig(BaseModel):
    """Object explorer presentation defaults."""

    sort_order: Literal["", "asc", "desc"] = Field(
        "", description="Sibling order: asc, desc or declaration order"
    )
    deleted_status: str = Field(
        DELETED_STATUS, description="Status label shown for deleted objects"
    )
    expand_depth: int = Field(
        4, ge=0, description="Tree levels expanded when rendering"
    )

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "WARNING", description="Log level"
    )
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    file: Optional[str] = Field(None, description="Log file path")
    max_size: int = Field(10485760, description="Max log file size in bytes")  # 10MB
    backup_count: int = Field(5, description="Number of backup log files")

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class ReconConfig(BaseSettings):
    """Main schemarecon configuration."""

    debug: bool = Field(False, description="Enable debug mode")

    # Conversion
    dialect: Optional[Literal["googlestandardsql", "postgresql"]] = Field(
        None, description="Override the dialect recorded in the conversion document"
    )
    type_maps: TypeMapConfig = Field(
        default_factory=TypeMapConfig, description="Dialect type maps"
    )

    # Presentation
    explorer: ExplorerConfig = Field(
        default_factory=ExplorerConfig, description="Object explorer configuration"
    )

    # System configuration
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_prefix="SCHEMARECON_",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("dialect", mode="before")
    @classmethod
    def parse_dialect(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        try:
            return Dialect.parse(str(v)).value
        except ValueError:
            # Let the Literal check report the bad value.
            return v

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ReconConfig":
        """Load configuration from a YAML file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            # Expand environment variables in the data
            data = cls._expand_env_vars(data)

            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}")
        except TypeError as e:
            raise ConfigurationError(f"Configuration must be a mapping: {e}")

    @classmethod
    def _expand_env_vars(cls, data: Any) -> Any:
        """Recursively expand environment variables in configuration data."""
        if isinstance(data, dict):
            return {k: cls._expand_env_vars(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [cls._expand_env_vars(item) for item in data]
        elif isinstance(data, str):
            return os.path.expandvars(data)
        else:
            return data

    def resolve_dialect(self, recorded: Dialect) -> Dialect:
        """The configured dialect override, or the one the document recorded."""
        if self.dialect is None:
            return recorded
        return Dialect(self.dialect)

    def get_type_map(self, dialect: Dialect) -> Optional[Dict[str, str]]:
        """Type map used to present target column types in a dialect."""
        if not dialect.translates_types:
            return None
        return self.type_maps.standard_to_pgsql

    def validate_config(self) -> None:
        """Validate the entire configuration for consistency."""
        for source_type, target_type in self.type_maps.standard_to_pgsql.items():
            if not source_type.strip() or not target_type.strip():
                raise ConfigurationError(
                    f"Type map 'standard_to_pgsql' contains an empty type name "
                    f"({source_type!r} -> {target_type!r})"
                )

        if not self.explorer.deleted_status.strip():
            raise ConfigurationError("Explorer deleted status label can not be empty")

        if self.logging.file and self.logging.max_size <= 0:
            raise ConfigurationError(
                f"Log file {self.logging.file} needs a positive max_size"
            )

    def to_yaml(self, path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                indent=2,
            )
