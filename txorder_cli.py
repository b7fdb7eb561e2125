from __future__ import annotations

import argparse
import json
import sys
from functools import cmp_to_key
from typing import Any

from txorder.config import CONFIG
from txorder.errors import ValidationError
from txorder.logging_config import setup_logging
from txorder.models import Transaction
from txorder.ordering import (
    compare_transactions,
    find_order_violations,
    same_block_ranges,
    sort_transactions,
    with_overrides,
)
from txorder.toposort import PROVIDERS, get_provider


def _read_payload(path: str) -> Any:
    try:
        if path == "-":
            return json.load(sys.stdin)
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except OSError as exc:
        raise ValidationError(f"Cannot read '{path}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid JSON in '{path}': {exc}") from exc


def _load_transactions(path: str) -> list[Transaction]:
    payload = _read_payload(path)
    if isinstance(payload, dict):
        payload = payload.get("transactions")
    if not isinstance(payload, list):
        raise ValidationError("Expected a JSON list of transactions or an object with a 'transactions' list")

    txs: list[Transaction] = []
    for position, item in enumerate(payload):
        try:
            txs.append(Transaction.from_dict(item))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ValidationError(f"Malformed transaction at position {position}: {exc!r}") from exc
    return txs


def cmd_sort(args: argparse.Namespace) -> None:
    txs = _load_transactions(args.input)
    config = with_overrides(
        CONFIG,
        ascending=True if args.ascending else None,
        order_provider=args.provider,
        cycle_policy=args.cycle_policy,
    )
    try:
        provider = get_provider(config.order_provider)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    sort_transactions(txs, provider=provider, config=config)

    if args.format == "txids":
        for tx in txs:
            print(tx.txid)
        return
    print(json.dumps([tx.to_dict() for tx in txs], indent=2))


def cmd_check(args: argparse.Namespace) -> None:
    txs = _load_transactions(args.input)
    violations = find_order_violations(txs, ascending=args.ascending)
    result = {
        "ok": not violations,
        "ascending": bool(args.ascending),
        "size": len(txs),
        "violations": [{"spender": spender, "parent": parent} for spender, parent in violations],
    }
    print(json.dumps(result, indent=2))
    if violations:
        raise SystemExit(1)


def cmd_ranges(args: argparse.Namespace) -> None:
    txs = _load_transactions(args.input)
    for tx in txs:
        tx.validate()
    txs.sort(key=_primary_key(args.ascending))
    rows = [
        {
            "start": start,
            "end": end,
            "block_height": txs[start].block_height,
            "txids": [tx.txid for tx in txs[start:end]],
        }
        for start, end in same_block_ranges(txs)
    ]
    print(json.dumps({"ok": True, "ranges": rows, "size": len(rows)}, indent=2))


def _primary_key(ascending: bool):
    return cmp_to_key(lambda a, b: compare_transactions(a, b, ascending))


def _add_input_args(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--input", default="-", help="Transactions JSON file, '-' for stdin")
    cmd.add_argument("--ascending", action="store_true", help="Oldest first (parent before spender)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Order blockchain transactions for display")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level",
    )
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log records on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sort_cmd = subparsers.add_parser("sort", help="Sort transactions for display")
    _add_input_args(sort_cmd)
    sort_cmd.add_argument("--provider", choices=sorted(PROVIDERS), help="Topological order provider")
    sort_cmd.add_argument("--cycle-policy", choices=["raise", "keep"], help="What to do with cyclic spends in one block")
    sort_cmd.add_argument("--format", choices=["json", "txids"], default="json", help="Output format")
    sort_cmd.set_defaults(func=cmd_sort)

    check_cmd = subparsers.add_parser("check", help="Report same-block dependency violations in the given order")
    _add_input_args(check_cmd)
    check_cmd.set_defaults(func=cmd_check)

    ranges_cmd = subparsers.add_parser("ranges", help="Show same-block ranges after the primary sort")
    _add_input_args(ranges_cmd)
    ranges_cmd.set_defaults(func=cmd_ranges)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(level=args.log_level, json_format=args.log_json)
        args.func(args)
    except ValidationError as exc:
        print(f"Validation error: {exc}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
