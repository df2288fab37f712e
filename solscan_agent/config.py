import os
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .errors import ConfigError
from .settings import SettingsStore

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_PORT = 8080

# Persisted settings key -> Config field
SETTINGS_FIELD_MAP = {
    "solscanKey": "solscan_key",
    "jupiterKey": "jupiter_key",
    "rpcUrl": "rpc_url",
    "privateKeyJSON": "private_key_json",
}


class Config(BaseModel):
    solscan_key: str = Field(..., min_length=1)
    jupiter_key: Optional[str] = None
    rpc_url: str = DEFAULT_RPC_URL
    private_key_json: Optional[str] = None
    port: int = DEFAULT_PORT
    log_level: str = "INFO"


def load_env_file(dotenv_path: Optional[Path] = None) -> None:
    """Loads a .env file from the project root (or ``dotenv_path``)."""
    path = dotenv_path or Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=path)


def load_config(
    env: Optional[Mapping[str, str]] = None,
    settings_store: Optional[SettingsStore] = None,
) -> Config:
    """Builds the Config from the environment, overlaid with persisted settings.

    Raises ConfigError when a required value is missing from both sources.
    """
    env = os.environ if env is None else env
    values = {
        "solscan_key": env.get("SOLSCAN_API_KEY") or None,
        "jupiter_key": env.get("JUPITER_API_KEY") or None,
        "rpc_url": env.get("SOLANA_RPC_URL") or DEFAULT_RPC_URL,
        "private_key_json": env.get("SOLANA_PRIVATE_KEY") or None,
        "log_level": env.get("LOG_LEVEL") or "INFO",
    }
    port = env.get("PORT")
    if port:
        try:
            values["port"] = int(port)
        except ValueError as e:
            raise ConfigError(f"PORT must be an integer, got {port!r}", variable="PORT") from e

    if settings_store is not None:
        persisted = settings_store.load()
        for key, field_name in SETTINGS_FIELD_MAP.items():
            value = persisted.get(key)
            if value:
                values[field_name] = value

    if not values["solscan_key"]:
        raise ConfigError("Missing environment variable: SOLSCAN_API_KEY", variable="SOLSCAN_API_KEY")
    return Config(**values)
