"""
Settings for the live shell.

Handles validation of shell options and loading of defaults from shell.yaml.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .watch import resolve_watch_path

SETTINGS_FILE = "shell.yaml"
DEFAULT_PROMPT = "py> "


class ShellOptions(BaseModel):
    """Validated options for one shell invocation."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    prompt: str = Field(default=DEFAULT_PROMPT)
    basic: bool = Field(default=False)
    quiet: bool = Field(default=False)
    hook: Optional[str] = Field(default=None)
    watch: Optional[Path] = Field(default=None)
    path: Optional[Path] = Field(default=None)
    bootstrap: Optional[str] = Field(default=None)
    config_dir: Optional[Path] = Field(default=None)

    @field_validator("hook")
    @classmethod
    def _hook_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("The hook name cannot be empty.")
        return value

    @field_validator("watch")
    @classmethod
    def _watch_exists(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        try:
            return resolve_watch_path(value)
        except ConfigurationError as exc:
            raise ValueError(exc.message) from exc

    @field_validator("path")
    @classmethod
    def _path_is_directory(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        if not value.expanduser().is_dir():
            raise ValueError(f"The path '{value}' is not a directory.")
        return value.expanduser().resolve()

    @field_validator("config_dir")
    @classmethod
    def _config_dir_absolute(cls, value: Optional[Path]) -> Optional[Path]:
        if value is None:
            return None
        return value.expanduser().resolve()

    @classmethod
    def build(cls, **values: Any) -> "ShellOptions":
        """
        Validate options, dropping unset (None) values so defaults apply.

        Raises:
            ConfigurationError: If any option is invalid
        """
        try:
            return cls(**{key: value for key, value in values.items() if value is not None})
        except ValidationError as exc:
            error = exc.errors()[0]
            setting = ".".join(str(part) for part in error.get("loc", ())) or None
            message = error.get("msg", str(exc))
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            raise ConfigurationError(message, setting=setting)

    def to_args(self) -> List[str]:
        """
        Reproduce these options as command-line flags.

        Returns:
            Flags accepted by the live-shell command line
        """
        args: List[str] = []
        if self.basic:
            args.append("--basic")
        if self.quiet:
            args.append("--quiet")
        if self.prompt != DEFAULT_PROMPT:
            args.append(f"--prompt={self.prompt}")
        if self.hook:
            args.append(f"--hook={self.hook}")
        if self.watch:
            args.append(f"--watch={self.watch}")
        if self.path:
            args.append(f"--path={self.path}")
        if self.bootstrap:
            args.append(f"--bootstrap={self.bootstrap}")
        if self.config_dir:
            args.append(f"--config={self.config_dir}")
        return args


def load_settings(config_dir: Optional[str] = None) -> Dict[str, Any]:
    """
    Load option defaults from shell.yaml.

    Args:
        config_dir: Directory containing shell.yaml (defaults to the working directory)

    Returns:
        Mapping of option names to values (empty if the file does not exist)

    Raises:
        ConfigurationError: If the YAML is malformed or not a mapping
    """
    config_path = Path(config_dir or ".") / SETTINGS_FILE

    if not config_path.exists():
        return {}

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {SETTINGS_FILE}: {str(e)}")
    except IOError as e:
        raise ConfigurationError(f"Failed to read {SETTINGS_FILE}: {str(e)}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"{SETTINGS_FILE} must contain a mapping of options")

    return data
