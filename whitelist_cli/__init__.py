"""
Merkle Whitelist CLI

Command-line interface over whitelist_core.

Usage:
    python -m whitelist_cli root emails.txt
    python -m whitelist_cli prove emails.txt ama@example.com --out proof.json
    python -m whitelist_cli verify proof.json ama@example.com
    python -m whitelist_cli check emails.txt ama@example.com
"""
