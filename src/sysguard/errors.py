"""Exceptions raised by sysguard."""


class SysguardError(Exception):
    """Base class for sysguard errors."""


class ConfigError(SysguardError, ValueError):
    """Raised when a setting is out of range."""
