"""
CLI Verify and Check Commands

verify: check a proof envelope for a target item against a trusted root,
holding no tree. The root comes from --root or is rebuilt from --items.
The root stored in the envelope is used only with --trust-envelope-root.

check: the whitelist flow end to end. Build the tree, prove the target,
verify the proof, report membership.

Usage:
    whitelist verify proof.json ama@example.com --root 0x... [--json]
    whitelist verify proof.json ama@example.com --items emails.txt
    whitelist check emails.txt ama@example.com [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path

from whitelist_cli.commands.build import build_tree
from whitelist_core.config import RuntimeConfig
from whitelist_core.crypto.hashing import from_hex, to_hex
from whitelist_core.merkle import verify_merkle_proof
from whitelist_core.schemas.errors import MalformedProofException, NotFoundError
from whitelist_core.schemas.proof import ProofEnvelope


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of a membership check for CLI output."""
    target: str = ""
    root: str = ""
    member: bool = False
    proof_steps: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in the original whitelist wording."""
    if summary.member:
        print(f'Email address "{summary.target}" is on the whitelist.')
    else:
        print(f'Email address "{summary.target}" is not on the whitelist.')
    for err in summary.errors:
        print(f"  ✗ {err}")


def _emit(summary: VerifySummary, as_json: bool) -> int:
    if as_json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)
    return EXIT_SUCCESS if summary.member else EXIT_VERIFICATION_FAILED


def verify_cmd(args: Namespace) -> int:
    """Handle verify command."""
    summary = VerifySummary(target=args.target)

    proof_path = Path(args.proof)
    if not proof_path.is_file():
        raise FileNotFoundError(f"Proof file not found: {proof_path}")

    # Malformed or tampered proofs fail closed
    try:
        envelope = ProofEnvelope.loads(proof_path.read_text(encoding="utf-8"))
        proof = envelope.to_proof()
    except MalformedProofException as e:
        logger.warning(f"Malformed proof in {proof_path}: {e.message}")
        summary.errors.append(f"Malformed proof: {e.message}")
        return _emit(summary, args.json)

    hasher = envelope.hasher
    if args.root:
        root = from_hex(args.root)
    elif args.items:
        tree = build_tree(args.items, args.runtime_config)
        root, hasher = tree.get_root(), tree.hasher
    elif args.trust_envelope_root:
        print(
            "Warning: verifying against the root stored in the proof file, "
            "which is not independently trusted",
            file=sys.stderr,
        )
        root = envelope.root_bytes
    else:
        summary.errors.append("No trusted root: pass --root, --items or --trust-envelope-root")
        return _emit(summary, args.json)

    summary.root = to_hex(root)
    summary.proof_steps = len(proof)
    summary.member = verify_merkle_proof(proof, args.target, root, hasher=hasher)

    logger.info(f"Verification of {args.target!r}: {'ok' if summary.member else 'failed'}")
    return _emit(summary, args.json)


def check_cmd(args: Namespace) -> int:
    """Handle check command."""
    config: RuntimeConfig = args.runtime_config
    tree = build_tree(args.items, config)
    root = tree.get_root()

    summary = VerifySummary(target=args.target, root=to_hex(root))

    try:
        proof = tree.get_proof(args.target)
    except NotFoundError:
        return _emit(summary, args.json)

    summary.proof_steps = len(proof)
    summary.member = tree.verify(proof, args.target, root)
    return _emit(summary, args.json)
