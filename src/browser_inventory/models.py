"""
Data models for a browser inventory run.

All objects are rebuilt per host and discarded after reporting.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Host:
    """A Windows host to inventory."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass
class ResolvedIdentity:
    """A loaded profile hive paired with its account name."""
    sid: str
    account: str  # DOMAIN\user, or the raw SID if translation failed
    prog_id: Optional[str] = None  # per-user UserChoice ProgId


@dataclass
class HostReport:
    """Outcome of inventorying one host."""
    host: Host
    service_enabled: bool = False
    sessions: List[str] = field(default_factory=list)
    identities: List[ResolvedIdentity] = field(default_factory=list)
    machine_default_checked: bool = False
    machine_default: Optional[str] = None
    error: Optional[str] = None

    @property
    def has_user_setting(self) -> bool:
        """True if any identity on this host has a per-user ProgId."""
        return any(identity.prog_id for identity in self.identities)
