"""
Parsers for Windows administrative utility output.

Every function here is pure: it takes captured stdout text from
query user, reg query or sc query and returns plain Python values.

Example `query user /server:PC527` output:

     USERNAME              SESSIONNAME        ID  STATE   IDLE TIME  LOGON TIME
    >alice                 console             1  Active      none   10/19/2026 8:01 AM
     bob                                       2  Disc         1:02  10/18/2026 4:47 PM

Example `reg query \\\\PC527\\HKU` output:

    HKEY_USERS\\.DEFAULT
    HKEY_USERS\\S-1-5-19
    HKEY_USERS\\S-1-5-21-1004336348-1177238915-682003330-1001
    HKEY_USERS\\S-1-5-21-1004336348-1177238915-682003330-1001_Classes
"""

import re
from typing import List, Optional

DOMAIN_USER_SID_PREFIX = re.compile(r'^S-1-5-21-', re.IGNORECASE)
CLASSES_SUFFIX = "_classes"

_STRING_TYPES = r'REG_(?:EXPAND_)?SZ'
_DEFAULT_VALUE_LINE = re.compile(
    r'^\s*\([^)]*\)\s+' + _STRING_TYPES + r'(?:\s+(.*?))?\s*$',
    re.IGNORECASE
)
_SERVICE_STATE_LINE = re.compile(r'^\s*STATE\s*:\s*\d+\s+(\w+)', re.IGNORECASE)

VALUE_NOT_SET = "(value not set)"


def _dedupe(items: List[str]) -> List[str]:
    """Drop duplicates, keeping first-appearance order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def parse_session_users(output: str) -> List[str]:
    """
    Parse usernames from `query user` output.

    The first non-blank line is the column header and is skipped. The
    username is the first column; a leading '>' marks the session the
    command ran in and is stripped.
    """
    lines = [line for line in output.splitlines() if line.strip()]
    users = []

    for line in lines[1:]:
        username = line.split()[0].lstrip('>')
        if username:
            users.append(username)

    return _dedupe(users)


def parse_loaded_hives(output: str) -> List[str]:
    """
    Parse domain-user SIDs from a `reg query \\\\host\\HKU` listing.

    Keeps subkeys whose last path segment starts with S-1-5-21- and drops
    the auxiliary <SID>_Classes hives. Matching ignores case and
    surrounding whitespace.
    """
    sids = []

    for line in output.splitlines():
        segment = line.strip().rsplit('\\', 1)[-1].strip()
        if not DOMAIN_USER_SID_PREFIX.match(segment):
            continue
        if segment.lower().endswith(CLASSES_SUFFIX):
            continue
        sids.append(segment)

    return _dedupe(sids)


def _clean_data(data: Optional[str]) -> Optional[str]:
    if not data or data.lower() == VALUE_NOT_SET:
        return None
    return data


def parse_registry_value(output: str, value_name: str) -> Optional[str]:
    """
    Extract string data for a named value from `reg query /v` output.

    Matches lines of the form `<name>    REG_SZ    <data>`.

    Returns:
        The data string, or None if the value line is absent or empty
    """
    pattern = re.compile(
        r'^\s*' + re.escape(value_name) + r'\s+' + _STRING_TYPES + r'(?:\s+(.*?))?\s*$',
        re.IGNORECASE
    )

    for line in output.splitlines():
        match = pattern.match(line)
        if match:
            return _clean_data(match.group(1))

    return None


def parse_registry_default_value(output: str) -> Optional[str]:
    """
    Extract string data for the default value from `reg query /ve` output.

    The marker is matched as any parenthesised word so that localized
    markers such as (Standard) are accepted alongside (Default).
    """
    for line in output.splitlines():
        match = _DEFAULT_VALUE_LINE.match(line)
        if match:
            return _clean_data(match.group(1))

    return None


def parse_service_state(output: str) -> Optional[str]:
    """
    Extract the run state (RUNNING, STOPPED, ...) from `sc query` output.

    Example line: `        STATE              : 4  RUNNING`
    """
    for line in output.splitlines():
        match = _SERVICE_STATE_LINE.match(line)
        if match:
            return match.group(1).upper()

    return None
