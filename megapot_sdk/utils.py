"""
Utility functions for the Megapot SDK.
"""
import urllib.parse
from decimal import Decimal
from typing import Union

from .constants import BASE_EXPLORER_URL


def validate_secure_url(url_name: str, url: str) -> None:
    """
    Ensure a service URL uses https unless it points at the local machine.

    Args:
        url_name: Name of the setting, used in the error message
        url: URL to validate

    Raises:
        ValueError: If the URL is not https and not local
    """
    parsed = urllib.parse.urlparse(url)
    host = parsed.hostname or ""
    is_local = host in ("localhost", "127.0.0.1", "::1")
    if parsed.scheme != "https" and not is_local:
        raise ValueError(f"{url_name} must use https:// for security (got: {parsed.scheme}://)")


def to_hex_hash(value: Union[bytes, str]) -> str:
    """Normalize a transaction hash to a 0x-prefixed lowercase hex string"""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if hasattr(value, "hex") and not isinstance(value, str):
        value = value.hex()
    value = str(value).lower()
    return value if value.startswith("0x") else "0x" + value


def parse_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human-readable token amount to the token's smallest unit.

    Args:
        amount: Amount such as "1.5" (floats are rejected to avoid drift)
        decimals: Token decimals

    Returns:
        Integer amount in the smallest unit

    Raises:
        ValueError: If the amount has more fractional digits than decimals
    """
    if isinstance(amount, float):
        raise ValueError("Use str, int or Decimal amounts, not float")
    value = Decimal(amount) * (Decimal(10) ** decimals)
    if value != value.to_integral_value():
        raise ValueError(f"Amount {amount} has more than {decimals} decimal places")
    return int(value)


def format_units(amount: int, decimals: int) -> Decimal:
    """Convert a smallest-unit integer amount to a Decimal for display"""
    return Decimal(amount) / (Decimal(10) ** decimals)


def tx_url(tx_hash: Union[bytes, str], explorer_url: str = BASE_EXPLORER_URL) -> str:
    """Return the block explorer link for a transaction"""
    return f"{explorer_url.rstrip('/')}/tx/{to_hex_hash(tx_hash)}"
