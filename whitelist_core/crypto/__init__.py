"""
Core cryptographic utilities.

Module 02 provides the Hasher used for leaves and internal tree nodes.
"""
from .hashing import (
    DEFAULT_ALGORITHM,
    DEFAULT_HASHER,
    SUPPORTED_ALGORITHMS,
    Hasher,
    encode_item,
    sha256,
    to_hex,
    from_hex,
)

__all__ = [
    "DEFAULT_ALGORITHM",
    "DEFAULT_HASHER",
    "SUPPORTED_ALGORITHMS",
    "Hasher",
    "encode_item",
    "sha256",
    "to_hex",
    "from_hex",
]
