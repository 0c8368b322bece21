"""
ProgId display names.

Maps the handler identifiers found under UserChoice to product names.
Unknown identifiers are shown as-is.
"""

from typing import Dict, Optional

PROGID_DISPLAY_NAMES: Dict[str, str] = {
    "ChromeHTML": "Google Chrome",
    "MSEdgeHTM": "Microsoft Edge",
    "FirefoxURL": "Mozilla Firefox",
}

# Firefox registers one ProgId per install, e.g. FirefoxURL-308046B0AF4A39CB
PROGID_PREFIX_NAMES: Dict[str, str] = {
    "FirefoxURL-": "Mozilla Firefox",
}


def display_name(prog_id: str, extra: Optional[Dict[str, str]] = None) -> str:
    """
    Get the product name for a ProgId.

    Args:
        prog_id: ProgId string from the registry
        extra: Additional ProgId -> name entries (take precedence)

    Returns:
        Product name, or prog_id unchanged if not recognised
    """
    if extra and prog_id in extra:
        return extra[prog_id]

    if prog_id in PROGID_DISPLAY_NAMES:
        return PROGID_DISPLAY_NAMES[prog_id]

    for prefix, name in PROGID_PREFIX_NAMES.items():
        if prog_id.startswith(prefix):
            return name

    return prog_id
