from __future__ import annotations

import argparse
import json
import sys
import uuid
from pathlib import Path

from .crypto.keyloader import ensure_signing_key, load_signing_key
from .crypto.signer import b64, derive_public_key, generate_private_key, private_key_bytes
from .errors import AttestorError
from .presence import Acknowledgments, create_presence_record
from .records.codec import serialize
from .records.create import issue_record
from .records.verify import verify
from .utils.clock import now_ms


def cmd_keygen(args: argparse.Namespace) -> int:
    if args.pem_out:
        ensure_signing_key(args.pem_out)
        print(f"wrote {args.pem_out}")
        return 0
    sk = generate_private_key()
    print(json.dumps({
        "private_key_b64": b64(private_key_bytes(sk)),
        "public_key_b64": b64(derive_public_key(sk)),
    }))
    return 0


def cmd_sign(args: argparse.Namespace) -> int:
    document = Path(args.document).read_bytes()
    acks = Acknowledgments(
        understands_approval=args.acknowledge,
        is_authorized=args.acknowledge,
        acting_knowingly=args.acknowledge,
    )
    try:
        key = args.key_b64 if args.key_b64 else load_signing_key()
        # offline signing has no approval session; the presence record gets its own id
        presence = create_presence_record(f"cli-{uuid.uuid4()}", now_ms(), acks)
        record = issue_record(
            document,
            args.intent,
            args.approver_ref,
            args.approver_label,
            presence,
            key,
            assisted_flag=args.assisted,
        )
    except AttestorError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    out = serialize(record)
    if args.output:
        Path(args.output).write_text(out, encoding="utf-8")
        print(f"wrote {args.output}")
    else:
        print(out)
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    try:
        document = Path(args.document).read_bytes()
        record_text = Path(args.record).read_text(encoding="utf-8")
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    outcome = verify(document, record_text)
    print(json.dumps(outcome.to_json_dict(), indent=2))
    return 0 if outcome.valid else 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser("attestor")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_key = sub.add_parser("keygen")
    p_key.add_argument("--pem-out", dest="pem_out")
    p_key.set_defaults(func=cmd_keygen)

    p_sign = sub.add_parser("sign")
    p_sign.add_argument("--document", required=True)
    p_sign.add_argument("--intent", required=True)
    p_sign.add_argument("--approver-ref", dest="approver_ref", required=True)
    p_sign.add_argument("--approver-label", dest="approver_label", required=True)
    p_sign.add_argument("--acknowledge", action="store_true")
    p_sign.add_argument("--assisted", action="store_true")
    p_sign.add_argument("--key-b64", dest="key_b64")
    p_sign.add_argument("--output")
    p_sign.set_defaults(func=cmd_sign)

    p_ver = sub.add_parser("verify")
    p_ver.add_argument("document")
    p_ver.add_argument("record")
    p_ver.set_defaults(func=cmd_verify)

    args = p.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
