"""
Utility functions for the browser inventory.

Includes:
- Process execution helpers
- Logging setup
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# query.exe, reg.exe and sc.exe write in the console OEM code page
CONSOLE_ENCODING = "oem" if sys.platform == "win32" else "utf-8"


class RemoteCommandError(Exception):
    """Error raised when a shell-out to a Windows utility fails."""

    def __init__(self, cmd: list, exit_code: int, stdout: str = "", stderr: str = ""):
        self.cmd = cmd
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"Command {cmd} failed with exit code {exit_code}: {self.detail}")

    @property
    def detail(self) -> str:
        """Best available error text (reg.exe and sc.exe often report on stdout)."""
        return (self.stderr or self.stdout).strip()


class CommandResult:
    """Result of a command execution."""

    def __init__(
        self,
        exit_code: int,
        stdout: str,
        stderr: str,
        duration_sec: float
    ):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.duration_sec = duration_sec
        self.success = exit_code == 0

    def __repr__(self):
        return f"CommandResult(exit_code={self.exit_code}, success={self.success})"


async def run_command(
    cmd: list[str],
    timeout: Optional[float] = None,
    check: bool = True,
    encoding: Optional[str] = None,
) -> CommandResult:
    """
    Run a command asynchronously.

    Args:
        cmd: Command and arguments as list
        timeout: Timeout in seconds (None = no timeout)
        check: Raise RemoteCommandError if exit code != 0
        encoding: Output encoding (default: console OEM code page on Windows)

    Returns:
        CommandResult with exit code, stdout, stderr, duration

    Raises:
        RemoteCommandError: If check=True and command fails, or the
            executable cannot be launched
        asyncio.TimeoutError: If timeout exceeded
    """
    encoding = encoding or CONSOLE_ENCODING
    start_time = datetime.now(timezone.utc)
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        raise RemoteCommandError(cmd, -1, stderr=str(e)) from e

    try:
        if timeout:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout
            )
        else:
            stdout, stderr = await process.communicate()
    finally:
        # Kill the tool on timeout or cancellation
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()

    result = CommandResult(
        exit_code=process.returncode,
        stdout=stdout.decode(encoding, errors='replace') if stdout else '',
        stderr=stderr.decode(encoding, errors='replace') if stderr else '',
        duration_sec=duration
    )
    logger.debug(f"{cmd[0]} exited {result.exit_code} in {result.duration_sec:.2f}s")

    if check and result.exit_code != 0:
        raise RemoteCommandError(
            cmd,
            result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr
        )

    return result


def setup_logging(log_level: str = 'WARNING') -> None:
    """
    Configure logging for the inventory run.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
