"""Persisted defaults for the simpleftp command line.

The last server, port and user that logged in successfully are
remembered, together with the transfer tuning options, so a bare
`simpleftp ls` talks to the same server as the previous command.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from simpleftp.config.paths import get_settings_path
from simpleftp.ftp.control import DEFAULT_BLOCKSIZE, DEFAULT_PORT

logger = logging.getLogger("simpleftp.settings")


@dataclass
class ClientSettings:
    """Command-line defaults stored between runs."""

    last_host: str = ""
    last_port: int = DEFAULT_PORT
    last_username: str = "anonymous"
    # None blocks without a timeout
    timeout: Optional[float] = None
    blocksize: int = DEFAULT_BLOCKSIZE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientSettings":
        """Build settings from stored data; keys this version does not know are dropped."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


class SettingsManager:
    """
    Loads and stores ClientSettings as JSON.

    A missing or unreadable file is never an error: the defaults are used
    and the file is rewritten on the next save.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path or get_settings_path()
        self._settings: Optional[ClientSettings] = None

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> ClientSettings:
        """Read settings from disk, falling back to defaults."""
        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._settings = ClientSettings.from_dict(json.load(f))
        except FileNotFoundError:
            self._settings = ClientSettings()
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self._config_path}: {e}")
            self._settings = ClientSettings()
        return self._settings

    def save(self, settings: ClientSettings) -> None:
        """
        Write settings to disk.

        Written to a temporary file first, then moved into place.
        """
        self._settings = settings
        self._config_path.parent.mkdir(parents=True, exist_ok=True)

        partial = self._config_path.with_suffix(".tmp")
        with open(partial, "w", encoding="utf-8") as f:
            json.dump(settings.to_dict(), f, indent=2)
        os.replace(partial, self._config_path)
        logger.debug(f"Saved settings to {self._config_path}")

    def reset(self) -> ClientSettings:
        """Forget all stored settings."""
        self._settings = ClientSettings()
        self._config_path.unlink(missing_ok=True)
        return self._settings

    def update(self, **changes: Any) -> ClientSettings:
        """
        Change the named fields and save.

        Unknown field names are ignored.

        Returns:
            The updated settings
        """
        settings = self._settings if self._settings is not None else self.load()
        for name, value in changes.items():
            if hasattr(settings, name):
                setattr(settings, name, value)
            else:
                logger.debug(f"Ignoring unknown setting {name!r}")
        self.save(settings)
        return settings
