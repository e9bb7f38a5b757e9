"""
Configuration management for proto generation.

Handles loading and merging configuration from JSON files,
providing defaults and validation for generator settings.
"""

import json
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass, field, fields, asdict
from enum import Enum


class ConfigError(Exception):
    """Exception raised for configuration-related errors."""

    pass


class AnyOfMode(Enum):
    """How anyOf alternatives are rendered."""

    ONEOF = "oneof"  # oneof any_of { alt_1 ... }
    REPEAT = "repeat"  # repeated <first branch> anyof_value


@dataclass
class GeneratorConfig:
    """Run-wide configuration for proto generation."""

    # Header settings
    package_name: str = "api.v1"
    go_package: str = "example.com/project/api/v1;v1"

    # Field handling
    use_optional: bool = True
    anyof_mode: AnyOfMode = AnyOfMode.ONEOF
    sort_fields: bool = True

    # Code style settings
    indent_size: int = 2
    add_comments: bool = True

    # Custom settings
    custom: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.anyof_mode, AnyOfMode):
            try:
                self.anyof_mode = AnyOfMode(str(self.anyof_mode).lower())
            except ValueError:
                valid = ", ".join(mode.value for mode in AnyOfMode)
                raise ConfigError(
                    f"Invalid anyof_mode: {self.anyof_mode} (expected one of: {valid})"
                ) from None

    @property
    def indent(self) -> str:
        return " " * self.indent_size


DEFAULT_CONFIG: Dict[str, Any] = {
    "package_name": "api.v1",
    "go_package": "example.com/project/api/v1;v1",
    "use_optional": True,
    "anyof_mode": "oneof",
    "sort_fields": True,
    "indent_size": 2,
    "add_comments": True,
}


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = dict(DEFAULT_CONFIG)

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorConfig:
        """
        Get complete configuration.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged configuration
        """
        base_config = self._defaults.copy()

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if custom_config:
            base_config.update(custom_config)

        return self._dict_to_config(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file {path}: {str(e)}"
            ) from e
        except OSError as e:
            raise ConfigError(
                f"Failed to load configuration file {path}: {str(e)}"
            ) from e

        if not isinstance(config, dict):
            raise ConfigError(
                f"Configuration file must contain a JSON object: {path}"
            )

        return config

    def _dict_to_config(self, config_dict: Dict[str, Any]) -> GeneratorConfig:
        """Convert dictionary to GeneratorConfig instance."""
        known_fields = {f.name for f in fields(GeneratorConfig)}

        config_args = {}
        custom_args = {}

        for key, value in config_dict.items():
            if key in known_fields:
                config_args[key] = value
            else:
                custom_args[key] = value

        # Unknown keys are kept in the custom dict
        if custom_args:
            existing_custom = dict(config_args.get("custom", {}))
            existing_custom.update(custom_args)
            config_args["custom"] = existing_custom

        return GeneratorConfig(**config_args)

    def save_config(self, config: GeneratorConfig, output_path: Union[str, Path]):
        """Save configuration to JSON file."""
        path = Path(output_path)

        config_dict = asdict(config)
        config_dict["anyof_mode"] = config.anyof_mode.value
        custom = config_dict.pop("custom")
        config_dict.update(custom)

        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(config_dict, f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {str(e)}") from e

    def validate_config(self, config: GeneratorConfig) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation warnings
        """
        warnings = []

        if not config.package_name:
            warnings.append("Empty package_name")
        else:
            for part in config.package_name.split("."):
                if not part.isidentifier():
                    warnings.append(f"Invalid proto package name: {config.package_name}")
                    break

        if not config.go_package:
            warnings.append("Empty go_package option")

        if config.indent_size < 0:
            warnings.append(f"Invalid indent_size: {config.indent_size}")

        return warnings


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorConfig:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged configuration
    """
    return ConfigManager().get_config(custom_config, config_file)


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "package_name": "petstore.v1",
    "go_package": "example.com/petstore/api/v1;v1",
    "use_optional": True,
    "anyof_mode": "repeat",
    "sort_fields": False,
}
