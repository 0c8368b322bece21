"""
Default Browser Inventory.

Walks a list of Windows hosts one at a time and reports which browser
each loaded user profile has chosen as its http handler, falling back to
the machine-wide StartMenuInternet client when no user on the host has
made a choice.

Per host:
1. Enable the remote registry service (skip host on failure)
2. List interactive sessions
3. List loaded S-1-5-21 user hives
4. Resolve each SID to DOMAIN\\user
5. Read each user's UserChoice ProgId
6. Read the machine-wide default, only if step 5 found nothing
"""

import logging
from typing import List, Optional, Sequence

from .collaborators import (
    IdentityTranslator,
    PowerShellIdentityTranslator,
    QueryUserSessionLister,
    RegExeRegistryReader,
    RegistryReader,
    ScServiceController,
    ServiceController,
    SessionLister,
)
from .models import Host, HostReport, ResolvedIdentity
from .parsers import (
    parse_loaded_hives,
    parse_registry_default_value,
    parse_registry_value,
    parse_session_users,
)
from .reporter import ConsoleReporter
from .utils import RemoteCommandError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "RemoteRegistry"

USER_CHOICE_KEY = r"Software\Microsoft\Windows\Shell\Associations\UrlAssociations\http\UserChoice"
USER_CHOICE_VALUE = "ProgId"
START_MENU_INTERNET_KEY = r"SOFTWARE\Clients\StartMenuInternet"


def hive_path(host: str, hive: str, subkey: str = "") -> str:
    """Build a reg.exe remote path: \\\\host\\HIVE[\\subkey]."""
    path = f"\\\\{host}\\{hive}"
    if subkey:
        path = f"{path}\\{subkey}"
    return path


async def enable_remote_service(
    controller: ServiceController,
    host: str,
    service_name: str = DEFAULT_SERVICE_NAME
) -> bool:
    """
    Set the service to auto-start and make sure it is running.

    Returns:
        True if the service is enabled, False on any failure
    """
    try:
        await controller.set_start_mode(host, service_name, "auto")

        state = await controller.query_state(host, service_name)
        if state != "RUNNING":
            logger.info(f"Starting {service_name} on {host} (state={state})")
            await controller.start(host, service_name)

        return True

    except RemoteCommandError as e:
        logger.warning(f"Could not enable {service_name} on {host}: {e.detail or e}")
        return False


async def enumerate_sessions(lister: SessionLister, host: str) -> List[str]:
    """Usernames with an interactive session on host (empty on failure)."""
    try:
        output = await lister.list_sessions(host)
    except RemoteCommandError as e:
        logger.info(f"No interactive sessions reported on {host}: {e.detail or e.exit_code}")
        return []

    users = parse_session_users(output)
    if not users:
        logger.info(f"No interactive sessions reported on {host}")

    return users


async def enumerate_loaded_profiles(registry: RegistryReader, host: str) -> List[str]:
    """SIDs of loaded domain-user hives on host, excluding _Classes hives."""
    sids: List[str] = []

    try:
        output = await registry.enumerate_keys(hive_path(host, "HKU"))
        sids = parse_loaded_hives(output)
    except RemoteCommandError as e:
        logger.warning(f"Failed to enumerate HKU on {host}: {e.detail}")

    if not sids:
        logger.warning(f"No loaded user profiles found on {host}")

    return sids


async def resolve_identity(translator: IdentityTranslator, sid: str) -> str:
    """
    Translate a SID to DOMAIN\\user.

    Never raises: orphaned SIDs, malformed input and translation
    failures all return the SID unchanged.
    """
    try:
        return await translator.translate(sid)
    except Exception as e:
        logger.debug(f"Could not translate {sid}: {e}")
        return sid


async def read_user_prog_id(registry: RegistryReader, host: str, sid: str) -> Optional[str]:
    """
    Read the user's http UserChoice ProgId.

    A missing value and a failed query both return None.
    """
    key = hive_path(host, "HKU", f"{sid}\\{USER_CHOICE_KEY}")
    try:
        output = await registry.query_value(key, USER_CHOICE_VALUE)
    except RemoteCommandError as e:
        logger.debug(f"UserChoice query failed for {sid} on {host}: {e.detail}")
        return None

    return parse_registry_value(output, USER_CHOICE_VALUE)


async def read_machine_default(registry: RegistryReader, host: str) -> Optional[str]:
    """Read the default StartMenuInternet client (None if absent or unreadable)."""
    key = hive_path(host, "HKLM", START_MENU_INTERNET_KEY)
    try:
        output = await registry.query_value(key)
    except RemoteCommandError as e:
        logger.debug(f"StartMenuInternet query failed on {host}: {e.detail}")
        return None

    return parse_registry_default_value(output)


class BrowserInventory:
    """
    Sequential default-browser inventory over a list of hosts.

    Collaborators are injected so tests can replace the Windows tools;
    by default the stock sc.exe/query.exe/reg.exe/powershell.exe
    implementations are used.
    """

    def __init__(
        self,
        hosts: Sequence[Host],
        service_controller: Optional[ServiceController] = None,
        session_lister: Optional[SessionLister] = None,
        registry: Optional[RegistryReader] = None,
        translator: Optional[IdentityTranslator] = None,
        reporter: Optional[ConsoleReporter] = None,
        service_name: str = DEFAULT_SERVICE_NAME,
        command_timeout: Optional[float] = None,
    ):
        self.hosts = list(hosts)
        self.service_controller = service_controller or ScServiceController(command_timeout)
        self.session_lister = session_lister or QueryUserSessionLister(command_timeout)
        self.registry = registry or RegExeRegistryReader(command_timeout)
        self.translator = translator or PowerShellIdentityTranslator(command_timeout)
        self.reporter = reporter or ConsoleReporter()
        self.service_name = service_name

    @classmethod
    def from_config(cls, config, reporter: Optional[ConsoleReporter] = None) -> "BrowserInventory":
        """Build an inventory from an InventoryConfig."""
        return cls(
            hosts=config.host_list,
            reporter=reporter or ConsoleReporter(progid_names=config.progid_names),
            service_name=config.service_name,
            command_timeout=config.command_timeout,
        )

    async def run(self) -> List[HostReport]:
        """
        Inventory every host in order.

        A host that fails never stops the run.

        Returns:
            One HostReport per host, in input order
        """
        reports = []

        for host in self.hosts:
            logger.info(f"Inventorying {host.name}")
            report = HostReport(host=host)

            try:
                await self._inventory_host(host, report)
            except Exception as e:
                logger.exception(f"Inventory failed on {host.name}")
                report.error = str(e)

            reports.append(report)

        done = sum(1 for r in reports if r.service_enabled and not r.error)
        logger.info(f"Inventory complete: {done}/{len(reports)} hosts processed")

        return reports

    async def _inventory_host(self, host: Host, report: HostReport):
        self.reporter.host_started(host)

        report.service_enabled = await enable_remote_service(
            self.service_controller, host.name, self.service_name
        )
        if not report.service_enabled:
            return

        report.sessions = await enumerate_sessions(self.session_lister, host.name)
        self.reporter.sessions_found(host, report.sessions)

        for sid in await enumerate_loaded_profiles(self.registry, host.name):
            identity = ResolvedIdentity(
                sid=sid,
                account=await resolve_identity(self.translator, sid),
            )
            identity.prog_id = await read_user_prog_id(self.registry, host.name, sid)
            report.identities.append(identity)
            self.reporter.user_setting(identity)

        # Host-level decision: only when no user on the host has a choice
        if not report.has_user_setting:
            report.machine_default_checked = True
            report.machine_default = await read_machine_default(self.registry, host.name)
            self.reporter.machine_default(host, report.machine_default)
