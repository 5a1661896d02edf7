"""
Address helpers.

Addresses are 20-byte hex strings with a 0x prefix. The registry stores
and compares them lower-cased.
"""

import hashlib
import re
import uuid

from nexusnft.config import ZERO_ADDRESS
from nexusnft.models.failure import InvalidInputError

_ADDRESS_PATTERN = re.compile(r"0x[0-9a-fA-F]{40}")


def is_address(value: str | None) -> bool:
    """Check whether a string is a well-formed 0x-prefixed address."""
    return value is not None and _ADDRESS_PATTERN.fullmatch(value) is not None


def normalize_address(value: str | None, field: str = "address") -> str:
    """
    Validate and lower-case an address.

    Raises:
        InvalidInputError: If the value is not a well-formed address
    """
    if value is None or not is_address(value):
        raise InvalidInputError(f"Invalid {field}: {value!r}", detail=field)
    return value.lower()


def same_address(a: str, b: str) -> bool:
    """Case-insensitive address comparison."""
    return a.lower() == b.lower()


def is_zero_address(value: str) -> bool:
    """Check for the zero address."""
    return value.lower() == ZERO_ADDRESS


def derive_contract_address(deployer: str, name: str, symbol: str) -> str:
    """
    Derive a fresh contract address for a deployment.

    Uses the last 20 bytes of a SHA3 digest over the deployment inputs
    and a random salt, so two deployments never collide.
    """
    digest = hashlib.sha3_256(
        f"{deployer.lower()}:{name}:{symbol}:{uuid.uuid4().hex}".encode()
    ).digest()
    return "0x" + digest[-20:].hex()


def new_transaction_hash() -> str:
    """Generate a 32-byte transaction hash."""
    return "0x" + hashlib.sha3_256(uuid.uuid4().bytes).hexdigest()
