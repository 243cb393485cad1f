"""Adapter configuration.

Configuration can come from

- Environment variables, see :py:meth:`Configuration.from_environment`

- `settings.json` in the settings folder, see :py:func:`discover_configuration`
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dataclasses_json import dataclass_json

from xdcadapter.chain import NetworkConfig, get_network_config
from xdcadapter.types import Slug, URL


logger = logging.getLogger(__name__)


#: Where we will store our settings file
#:
#: Store under user home
#:
DEFAULT_SETTINGS_PATH = Path(os.path.expanduser("~/.xdcadapter"))


@dataclass_json
@dataclass
class Configuration:
    """Configuration for XDC adapter clients."""

    #: `mainnet`, `apothem` or `testnet`
    network: Slug = "mainnet"

    #: Override the network default JSON-RPC endpoint
    rpc_url: Optional[URL] = None

    #: Hex private key for state changing operations
    private_key: Optional[str] = None

    #: Override the network default explorer API endpoint
    explorer_api_url: Optional[URL] = None

    explorer_api_key: Optional[str] = None

    #: JSON-RPC and HTTP timeout in seconds
    timeout: float = 30.0

    def __repr__(self):
        # Never leak the private key to logs
        key = "set" if self.private_key else "not set"
        return f"<Configuration network:{self.network} rpc_url:{self.rpc_url} private_key:{key}>"

    def get_network_config(self) -> NetworkConfig:
        return get_network_config(self.network)

    @staticmethod
    def from_environment(environ: dict | None = None) -> "Configuration":
        """Read configuration from `XDC_` prefixed environment variables."""
        if environ is None:
            environ = os.environ

        timeout = environ.get("XDC_TIMEOUT")

        return Configuration(
            network=environ.get("XDC_NETWORK") or "mainnet",
            rpc_url=environ.get("XDC_RPC_URL") or None,
            private_key=environ.get("XDC_PRIVATE_KEY") or None,
            explorer_api_url=environ.get("XDC_EXPLORER_API_URL") or None,
            explorer_api_key=environ.get("XDC_EXPLORER_API_KEY") or None,
            timeout=float(timeout) if timeout else 30.0,
        )


def discover_configuration(settings_path: Path = DEFAULT_SETTINGS_PATH) -> Optional[Configuration]:
    """Read `settings.json` if it exists.

    :return:
        ``None`` if there is no settings file
    """
    assert isinstance(settings_path, Path), f"Got {settings_path.__class__}"
    settings_file = settings_path / "settings.json"
    if not settings_file.exists():
        return None

    logger.info("Reading settings from %s", settings_file)
    return Configuration.from_json(settings_file.read_text())


def save_configuration(config: Configuration, settings_path: Path = DEFAULT_SETTINGS_PATH) -> Path:
    """Write `settings.json`.

    The file may contain a private key, so it is made readable by the owner only.
    """
    assert isinstance(settings_path, Path), f"Got {settings_path.__class__}"
    settings_path.mkdir(parents=True, exist_ok=True)
    settings_file = settings_path / "settings.json"
    settings_file.write_text(config.to_json(indent=2))
    os.chmod(settings_file, 0o600)
    logger.info("Saved settings to %s", settings_file)
    return settings_file
