"""Appliance inventory loaded from YAML.

```yaml
defaults:
  username: admin
  password_env: BIGIP_PASSWORD
  verify_ssl: false

appliances:
  bigip-a:
    name: "Primary LTM"
    host: 10.1.1.245
  bigip-b:
    name: "Standby LTM"
    host: 10.1.1.246
    auth_mode: token
```
"""
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from ..client import BigIPClient
from .settings import ApplianceConfig

logger = logging.getLogger(__name__)


class ApplianceInventory:
    """Manages the appliances declared in the YAML config."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config()
        self._config: dict = {}
        self._clients: dict[str, BigIPClient] = {}
        self._load_config()

    def _find_config(self) -> str:
        """Find the appliances.yaml config file."""
        env_path = os.environ.get("LTMCRAFT_CONFIG")
        if env_path:
            return env_path

        search_paths = [
            Path.cwd() / "configs" / "appliances.yaml",
            Path.cwd() / "appliances.yaml",
            Path.home() / ".config" / "ltmcraft" / "appliances.yaml",
            Path("/etc/ltmcraft/appliances.yaml"),
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            "Could not find appliances.yaml. Create one in ./configs/appliances.yaml "
            "or point LTMCRAFT_CONFIG at it"
        )

    def _load_config(self) -> None:
        with open(self.config_path) as f:
            self._config = yaml.safe_load(f) or {}

        defaults = self._config.get("defaults", {}) or {}
        appliances = self._config.get("appliances", {}) or {}
        for appliance_id, appliance in appliances.items():
            for key, value in defaults.items():
                appliance.setdefault(key, value)
            appliance.setdefault("name", appliance_id)
            if "host" not in appliance:
                logger.warning(f"Appliance '{appliance_id}' has no host configured")
        self._config["appliances"] = appliances

    def get_appliance_ids(self) -> list[str]:
        return list(self._config["appliances"].keys())

    def get_appliance_config(self, appliance_id: str) -> ApplianceConfig:
        appliances = self._config["appliances"]
        if appliance_id not in appliances:
            raise KeyError(f"Unknown appliance: {appliance_id}")
        return ApplianceConfig(**appliances[appliance_id])

    def get_client(self, appliance_id: str) -> BigIPClient:
        """Get or create the REST client for an appliance."""
        if appliance_id not in self._clients:
            self._clients[appliance_id] = BigIPClient(self.get_appliance_config(appliance_id))
        return self._clients[appliance_id]

    async def close_all(self) -> None:
        """Close every open client session."""
        for client in self._clients.values():
            await client.close()
        self._clients.clear()
