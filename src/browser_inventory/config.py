"""
Inventory configuration loader.

Loads the host list and run options from a YAML file, with environment
variable overrides for ad-hoc runs.

Config file location: /etc/browser-inventory/config.yaml

Example config.yaml:
    hosts:
      - PC527
      - PC528
    service_name: RemoteRegistry
    command_timeout: 60
    progid_names:
      BraveHTML: Brave
    log_level: INFO
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .models import Host

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/browser-inventory/config.yaml")


class InventoryConfig(BaseModel):
    """Configuration for a browser inventory run."""

    hosts: List[str] = Field(
        ...,
        min_length=1,
        description="Windows hosts to inventory, processed in order"
    )

    service_name: str = Field(
        default="RemoteRegistry",
        min_length=1,
        description="Service enabled on each host before registry access"
    )

    command_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-command timeout in seconds (None = tool default)"
    )

    progid_names: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra ProgId -> display name entries"
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR)"
    )

    @field_validator('hosts')
    @classmethod
    def validate_hosts(cls, v):
        hosts = [h.strip() for h in v]
        if any(not h for h in hosts):
            raise ValueError('hosts must not contain blank entries')
        return hosts

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            raise ValueError('log_level must be DEBUG, INFO, WARNING, or ERROR')
        return v.upper()

    @property
    def host_list(self) -> List[Host]:
        """Hosts as descriptors, in configured order."""
        return [Host(name=h) for h in self.hosts]


def _env_overrides(config_dict: dict, hosts: bool = True) -> dict:
    """Apply BROWSER_INVENTORY_HOSTS / LOG_LEVEL overrides."""
    env_hosts = os.environ.get('BROWSER_INVENTORY_HOSTS')
    if hosts and env_hosts:
        config_dict['hosts'] = [h for h in env_hosts.split(',') if h.strip()]
        logger.info(f"Environment override: hosts={config_dict['hosts']}")

    env_level = os.environ.get('LOG_LEVEL')
    if env_level:
        config_dict['log_level'] = env_level
        logger.info(f"Environment override: log_level={env_level}")

    return config_dict


def load_config(config_path: Optional[Path] = None) -> InventoryConfig:
    """
    Load inventory configuration from YAML file.

    Args:
        config_path: Path to config file (default: /etc/browser-inventory/config.yaml)

    Returns:
        InventoryConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        OSError: If config file can't be read
        ValueError: If config is empty, not valid YAML, or invalid
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading config from {config_path}")

    with open(config_path, 'r') as f:
        try:
            config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if config_dict is None:
        raise ValueError(f"Config file is empty: {config_path}")

    if not isinstance(config_dict, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    return InventoryConfig(**_env_overrides(config_dict))


def config_from_hosts(hosts: List[str], **options) -> InventoryConfig:
    """Build a config from an explicit host list; only LOG_LEVEL is taken from the environment."""
    return InventoryConfig(**_env_overrides({'hosts': list(hosts), **options}, hosts=False))
