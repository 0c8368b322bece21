"""
Console reporter.

Prints findings line by line while hosts are processed.
"""

import sys
from typing import Dict, List, Optional, TextIO

from .models import Host, ResolvedIdentity
from .progids import display_name


class ConsoleReporter:
    """Line-oriented, human-readable output."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        progid_names: Optional[Dict[str, str]] = None
    ):
        self.stream = stream
        self.progid_names = progid_names or {}

    def _print(self, line: str):
        print(line, file=self.stream or sys.stdout)

    def host_started(self, host: Host):
        self._print(f"=== {host.name} ===")

    def sessions_found(self, host: Host, users: List[str]):
        if users:
            self._print(f"Interactive sessions: {', '.join(users)}")

    def user_setting(self, identity: ResolvedIdentity):
        if identity.prog_id:
            name = display_name(identity.prog_id, self.progid_names)
            self._print(f"[{identity.account}] ProgId = {identity.prog_id} ({name})")
        else:
            self._print(f"[{identity.account}] No explicit per-user default browser set.")

    def machine_default(self, host: Host, client: Optional[str]):
        if client:
            self._print(f"Machine-wide default browser client: {client}")
        else:
            self._print("No machine-wide default browser found.")
