"""
Module 02 - Hashing Utilities
Digest primitives for Merkle commitments.

This module provides:
- Hasher: stateless digest + ordered pair combination for tree nodes
- SHA-256 helpers for raw bytes
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Only standard cryptographic digests are accepted
- Items are hashed exactly as given; str items are UTF-8 encoded, nothing
  is stripped or normalized
- combine(left, right) = hash(left + right) and is order sensitive
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Callable, Union

from whitelist_core.schemas.errors import UnsupportedAlgorithmException


Item = Union[bytes, bytearray, str]


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte SHA-256 digest

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def _blake2b_256(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32).digest()


# Allow-list of digest functions keyed by algorithm name
_ALGORITHMS: dict[str, Callable[[bytes], bytes]] = {
    "sha256": sha256,
    "sha3_256": lambda data: hashlib.sha3_256(data).digest(),
    "sha512": lambda data: hashlib.sha512(data).digest(),
    "blake2b": _blake2b_256,
}

_DIGEST_SIZES: dict[str, int] = {
    "sha256": 32,
    "sha3_256": 32,
    "sha512": 64,
    "blake2b": 32,
}

DEFAULT_ALGORITHM = "sha256"
SUPPORTED_ALGORITHMS: tuple[str, ...] = tuple(sorted(_ALGORITHMS))


def encode_item(item: Item) -> bytes:
    """
    Convert an item to the exact bytes that get hashed.

    Args:
        item: Raw bytes, or a str which is UTF-8 encoded

    Raises:
        TypeError: If item is neither bytes nor str
    """
    if isinstance(item, str):
        return item.encode("utf-8")
    if isinstance(item, (bytes, bytearray)):
        return bytes(item)
    raise TypeError(f"Items must be bytes or str, got {type(item).__name__}")


@dataclass(frozen=True)
class Hasher:
    """
    Stateless digest function used for leaves and internal nodes.

    Instances are immutable and safe to share across threads.

    Attributes:
        algorithm: Name of the digest algorithm (see SUPPORTED_ALGORITHMS)

    Example:
        >>> h = Hasher()
        >>> h.combine(h.hash(b"a"), h.hash(b"b")) == h.hash(h.hash(b"a") + h.hash(b"b"))
        True
    """
    algorithm: str = DEFAULT_ALGORITHM

    def __post_init__(self) -> None:
        if self.algorithm not in _ALGORITHMS:
            raise UnsupportedAlgorithmException(
                self.algorithm, supported=list(SUPPORTED_ALGORITHMS)
            )

    @property
    def digest_size(self) -> int:
        """Length in bytes of every digest this hasher produces."""
        return _DIGEST_SIZES[self.algorithm]

    def hash(self, data: bytes) -> bytes:
        """Digest raw bytes."""
        return _ALGORITHMS[self.algorithm](data)

    def hash_item(self, item: Item) -> bytes:
        """Digest an item, UTF-8 encoding it first if it is a str."""
        return self.hash(encode_item(item))

    def combine(self, left: bytes, right: bytes) -> bytes:
        """
        Combine two child digests into their parent.

        The order of the operands is significant: combine(a, b) differs
        from combine(b, a) unless a == b.
        """
        return self.hash(left + right)


DEFAULT_HASHER = Hasher()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "DEFAULT_ALGORITHM",
    "DEFAULT_HASHER",
    "SUPPORTED_ALGORITHMS",
    "Hasher",
    "Item",
    "encode_item",
    "sha256",
    "to_hex",
    "from_hex",
]
