"""Browser Inventory - default web browser per user on remote Windows hosts"""

__version__ = "0.1.0"

from .models import Host, HostReport, ResolvedIdentity
from .inventory import (
    BrowserInventory,
    enable_remote_service,
    enumerate_sessions,
    enumerate_loaded_profiles,
    resolve_identity,
    read_user_prog_id,
    read_machine_default,
)
from .progids import PROGID_DISPLAY_NAMES, display_name
from .config import InventoryConfig, load_config

__all__ = [
    # Version
    "__version__",

    # Models
    "Host",
    "HostReport",
    "ResolvedIdentity",

    # Pipeline
    "BrowserInventory",
    "enable_remote_service",
    "enumerate_sessions",
    "enumerate_loaded_profiles",
    "resolve_identity",
    "read_user_prog_id",
    "read_machine_default",

    # ProgIds
    "PROGID_DISPLAY_NAMES",
    "display_name",

    # Configuration
    "InventoryConfig",
    "load_config",
]
