"""Runtime settings for sysguard."""

import os
from dataclasses import dataclass

from sysguard.errors import ConfigError

DEFAULT_PAGE_SIZE = 30
DEFAULT_REFRESH_INTERVAL = 2.0  # seconds

ENV_PREFIX = "SYSGUARD_"


@dataclass(slots=True, frozen=True)
class Settings:
    """
    Settings for the process pipeline and the application around it.

    Only ``page_size`` and ``refresh_interval`` affect the pipeline; the
    logging fields are consumed by ``sysguard.logging_setup``.
    """

    page_size: int = DEFAULT_PAGE_SIZE
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    log_level: str = "INFO"
    log_file: str | None = None

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise ConfigError(f"page_size must be positive, got {self.page_size}")
        if self.refresh_interval <= 0:
            raise ConfigError(
                f"refresh_interval must be positive, got {self.refresh_interval}"
            )

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """
        Build settings from ``SYSGUARD_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigError: If a value cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ

        try:
            page_size = int(env.get(f"{ENV_PREFIX}PAGE_SIZE", DEFAULT_PAGE_SIZE))
            interval = float(
                env.get(f"{ENV_PREFIX}REFRESH_INTERVAL", DEFAULT_REFRESH_INTERVAL)
            )
        except ValueError as exc:
            raise ConfigError(f"invalid sysguard setting: {exc}") from exc

        return cls(
            page_size=page_size,
            refresh_interval=interval,
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
            log_file=env.get(f"{ENV_PREFIX}LOG_FILE") or None,
        )
