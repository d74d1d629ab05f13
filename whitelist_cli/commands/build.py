"""
CLI Root and Prove Commands

Build a tree from an items file, print its root, or emit a proof envelope
for one item.

Usage:
    whitelist root emails.txt [--json]
    whitelist prove emails.txt ama@example.com [--out proof.json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path

from whitelist_cli.items import load_items
from whitelist_core.config import RuntimeConfig
from whitelist_core.merkle import MerkleTree
from whitelist_core.schemas.errors import NotFoundError
from whitelist_core.schemas.proof import ProofEnvelope


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_NOT_A_MEMBER = 2


@dataclass
class RootSummary:
    """Summary of a built tree for CLI output."""
    items_path: str
    root: str
    leaf_count: int
    depth: int
    algorithm: str
    odd_policy: str


def build_tree(items_path: str, config: RuntimeConfig) -> MerkleTree:
    """Load items and build a tree with the configured parameters."""
    items = load_items(items_path)
    return config.tree.make_tree().build(items)


def root_cmd(args: Namespace) -> int:
    """Handle root command."""
    config: RuntimeConfig = args.runtime_config
    tree = build_tree(args.items, config)

    summary = RootSummary(
        items_path=args.items,
        root=tree.get_hex_root(),
        leaf_count=tree.leaf_count,
        depth=tree.depth,
        algorithm=tree.hasher.algorithm,
        odd_policy=tree.odd_policy.value,
    )

    if args.json:
        print(json.dumps(asdict(summary), indent=2))
    else:
        print(summary.root)
    return EXIT_SUCCESS


def prove_cmd(args: Namespace) -> int:
    """Handle prove command."""
    config: RuntimeConfig = args.runtime_config
    tree = build_tree(args.items, config)

    try:
        proof = tree.get_proof(args.target)
    except NotFoundError:
        logger.info(f"No leaf for {args.target!r}")
        if args.json:
            print(json.dumps({"target": args.target, "member": False}, indent=2))
        else:
            print(f'"{args.target}" is not on the whitelist.', file=sys.stderr)
        return EXIT_NOT_A_MEMBER

    envelope = ProofEnvelope.from_proof(
        proof,
        root=tree.get_root(),
        hasher=tree.hasher,
        odd_policy=tree.odd_policy,
    )

    if args.out:
        out_path = Path(args.out)
        out_path.write_text(envelope.dumps() + "\n", encoding="utf-8")
        logger.info(f"Wrote proof for leaf {proof.index} to {out_path}")
        if args.json:
            print(json.dumps({"target": args.target, "member": True, "out": str(out_path)}, indent=2))
        else:
            print(f"Proof written to {out_path}")
    else:
        print(envelope.dumps())

    return EXIT_SUCCESS
