"""
Remote Windows collaborators.

Capability interfaces for the external facilities the inventory relies on,
plus default implementations that shell out to the stock Windows tools
(sc.exe, query.exe, reg.exe, powershell.exe) from an admin workstation.
All of them run with the caller's ambient credentials.

Implementations raise RemoteCommandError when the underlying tool fails;
callers decide whether that is fatal.
"""

import asyncio
import logging
import re
from typing import List, Optional, Protocol

from .parsers import parse_service_state
from .utils import RemoteCommandError, run_command

logger = logging.getLogger(__name__)

# sc.exe: "An instance of the service is already running."
ERROR_SERVICE_ALREADY_RUNNING = 1056

SID_PATTERN = re.compile(r'^S-\d+(-\d+)+$', re.IGNORECASE)


class ServiceController(Protocol):
    """Remote service control."""

    async def set_start_mode(self, host: str, service: str, mode: str = "auto") -> None: ...

    async def start(self, host: str, service: str) -> None: ...

    async def query_state(self, host: str, service: str) -> Optional[str]: ...


class SessionLister(Protocol):
    """Remote interactive-session listing (tabular text)."""

    async def list_sessions(self, host: str) -> str: ...


class RegistryReader(Protocol):
    """Remote registry enumeration and value queries (tabular text)."""

    async def enumerate_keys(self, key_path: str) -> str: ...

    async def query_value(self, key_path: str, value_name: Optional[str] = None) -> str: ...


class IdentityTranslator(Protocol):
    """SID to account-name translation."""

    async def translate(self, sid: str) -> str: ...


class ShellCollaborator:
    """Base for collaborators that run a local Windows tool."""

    # None decodes with the console code page
    encoding: Optional[str] = None

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def _run(self, cmd: List[str], check: bool = True):
        try:
            return await run_command(cmd, timeout=self.timeout, check=check, encoding=self.encoding)
        except asyncio.TimeoutError:
            raise RemoteCommandError(cmd, -1, stderr=f"Timed out after {self.timeout}s")


class ScServiceController(ShellCollaborator):
    """Service control via sc.exe \\\\host."""

    async def set_start_mode(self, host: str, service: str, mode: str = "auto") -> None:
        # sc.exe wants "start=" and the mode as separate arguments
        await self._run(["sc.exe", f"\\\\{host}", "config", service, "start=", mode])

    async def start(self, host: str, service: str) -> None:
        cmd = ["sc.exe", f"\\\\{host}", "start", service]
        result = await self._run(cmd, check=False)

        if result.exit_code not in (0, ERROR_SERVICE_ALREADY_RUNNING):
            raise RemoteCommandError(cmd, result.exit_code, result.stdout, result.stderr)

    async def query_state(self, host: str, service: str) -> Optional[str]:
        result = await self._run(["sc.exe", f"\\\\{host}", "query", service])
        return parse_service_state(result.stdout)


class QueryUserSessionLister(ShellCollaborator):
    """Interactive sessions via `query user /server:host`."""

    async def list_sessions(self, host: str) -> str:
        result = await self._run(["query.exe", "user", f"/server:{host}"])
        return result.stdout


class RegExeRegistryReader(ShellCollaborator):
    """Remote registry access via reg.exe against \\\\host\\HIVE paths."""

    async def enumerate_keys(self, key_path: str) -> str:
        result = await self._run(["reg.exe", "query", key_path])
        return result.stdout

    async def query_value(self, key_path: str, value_name: Optional[str] = None) -> str:
        cmd = ["reg.exe", "query", key_path]
        if value_name is None:
            cmd.append("/ve")
        else:
            cmd.extend(["/v", value_name])

        result = await self._run(cmd)
        return result.stdout


class PowerShellIdentityTranslator(ShellCollaborator):
    """SID translation through .NET SecurityIdentifier.Translate()."""

    encoding = "utf-8"

    SCRIPT = (
        "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
        "(New-Object System.Security.Principal.SecurityIdentifier('{sid}'))"
        ".Translate([System.Security.Principal.NTAccount]).Value"
    )

    async def translate(self, sid: str) -> str:
        # The SID is interpolated into a script, so only well-formed SIDs pass
        if not SID_PATTERN.match(sid):
            raise ValueError(f"Not a SID: {sid!r}")

        cmd = [
            "powershell.exe", "-NoProfile", "-NonInteractive",
            "-Command", self.SCRIPT.format(sid=sid),
        ]
        result = await self._run(cmd)

        account = result.stdout.strip()
        if not account:
            raise RemoteCommandError(cmd, result.exit_code, result.stdout, result.stderr)

        return account
