"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the error taxonomy and canonical serialization API.

The proof transport schema depends on the Merkle module and is imported
from whitelist_core.schemas.proof directly.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
    loads_canonical,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    ConfigException,
    EmptySetError,
    EmptyTreeError,
    ErrorCodes,
    MalformedProofException,
    NotFoundError,
    TreeAlreadyBuiltError,
    UnsupportedAlgorithmException,
    WhitelistError,
    WhitelistException,
)

__all__ = [
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "loads_canonical",
    # Errors
    "CanonicalizationException",
    "ConfigException",
    "EmptySetError",
    "EmptyTreeError",
    "ErrorCodes",
    "MalformedProofException",
    "NotFoundError",
    "TreeAlreadyBuiltError",
    "UnsupportedAlgorithmException",
    "WhitelistError",
    "WhitelistException",
]
