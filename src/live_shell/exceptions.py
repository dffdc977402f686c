"""
Errors raised by the live shell itself.

Code typed at the prompt raises whatever it raises; only faults in how the
shell was set up are reported through these types.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ShellError(Exception):
    """Base class for shell faults."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigurationError(ShellError):
    """
    Invalid shell binary, watch path, hook name or settings file.

    ``setting`` names the option (or environment variable) at fault.
    """

    setting: Optional[str] = None

    def __str__(self) -> str:
        if self.setting and self.setting not in self.message:
            return f"{self.message} (setting: {self.setting})"
        return self.message
