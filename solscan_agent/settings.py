import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from mcp.server.fastmcp.utilities.logging import get_logger

from .errors import PersistenceError

DEFAULT_SETTINGS_FILE = Path(__file__).parent.parent / "user-settings.json"

logger = get_logger(__name__)


def settings_file_from_env() -> Path:
    override = os.getenv("SOLSCAN_AGENT_SETTINGS_FILE")
    return Path(override) if override else DEFAULT_SETTINGS_FILE


class SettingsStore:
    """Flat key-value settings document persisted as JSON on disk.

    The document is written wholesale on every save; there is no field-level
    merge at this layer.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else settings_file_from_env()

    def load(self) -> Dict[str, Any]:
        """Loads the settings, creating an empty document if the file is absent."""
        if not self.path.exists():
            logger.info(f"Settings file {self.path} not found, creating an empty one.")
            try:
                self._write({})
            except OSError as e:
                # Reading must still work on a read-only filesystem
                logger.warning(f"Could not create settings file {self.path}: {e}")
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Error loading settings from {self.path}: {e}. Using empty settings.")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Settings file {self.path} does not hold a JSON object. Using empty settings.")
            return {}
        return data

    def save(self, settings: Dict[str, Any]) -> None:
        """Replaces the persisted settings with ``settings``."""
        try:
            self._write(settings)
        except (OSError, TypeError, ValueError) as e:
            logger.exception(f"Failed to save settings to {self.path}: {e}")
            raise PersistenceError("Failed to save settings", path=str(self.path)) from e
        logger.info(f"Saved settings to {self.path}")

    def get(self, key: str) -> Optional[Any]:
        return self.load().get(key)

    def has(self, key: str) -> bool:
        return bool(self.load().get(key))

    def _write(self, settings: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings, indent=2)
        with open(self.path, "w") as f:
            f.write(payload)
