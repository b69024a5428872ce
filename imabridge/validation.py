"""
Address checks shared by every address entry point
"""

import re
from typing import Optional

from .exceptions import InputValidationError

ADDRESS_PATTERN = re.compile(r'^0x[a-fA-F0-9]{40}$')
BYTES32_PATTERN = re.compile(r'^0x[a-fA-F0-9]{64}$')


def is_valid_address(value: Optional[str]) -> bool:
    """True when value is a 0x-prefixed 20 byte hex string"""
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value))


def is_valid_bytes32(value: Optional[str]) -> bool:
    return isinstance(value, str) and bool(BYTES32_PATTERN.match(value))


def require_address(value: Optional[str], field: str = 'address') -> str:
    """Return value unchanged or raise InputValidationError"""
    if not value:
        raise InputValidationError(f"{field} is required", field=field)
    if not is_valid_address(value):
        raise InputValidationError("Address is invalid", field=field)
    return value
