"""Appliance configuration and inventory."""
from .inventory import ApplianceInventory
from .settings import ApplianceConfig

__all__ = ["ApplianceConfig", "ApplianceInventory"]
