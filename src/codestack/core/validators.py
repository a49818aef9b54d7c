"""Format validators for snippet identifiers and secrets."""

import re
from typing import Any, Final

MODIFICATION_CODE_LENGTH: Final[int] = 12
UUID_REGEX: Final[str] = (
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
MODIFICATION_CODE_REGEX: Final[str] = rf"^[A-Za-z0-9]{{{MODIFICATION_CODE_LENGTH}}}$"

_UUID_PATTERN: Final[re.Pattern[str]] = re.compile(UUID_REGEX)
_MODIFICATION_CODE_PATTERN: Final[re.Pattern[str]] = re.compile(MODIFICATION_CODE_REGEX)


def is_valid_uuid(value: Any) -> bool:
    """Check for the canonical hyphenated UUID form (any version, any case).

    Braced, URN-prefixed and hyphen-less spellings are rejected even though
    ``uuid.UUID`` would accept them.
    """
    return isinstance(value, str) and _UUID_PATTERN.fullmatch(value) is not None


def is_valid_modification_code(value: Any) -> bool:
    """Check that a value has the shape of a modification code (12 alphanumerics)."""
    return isinstance(value, str) and _MODIFICATION_CODE_PATTERN.fullmatch(value) is not None
