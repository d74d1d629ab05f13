"""
Merkle whitelist core.

Authenticated set commitments: build a Merkle root over an ordered set of
items, then produce and verify compact membership proofs.
"""

__version__ = "0.1.0"
