"""Display ordering for lists of transactions.

Transactions are sorted by confirmation status, block height and first-seen
time. Runs of transactions confirmed in the same block are then re-ordered
topologically over their inputs, so a spender never lands on the wrong side of
the transaction it spends from:

* descending (default): spender first, then the transaction it spends from;
* ascending: parent first, then its spender.

Transactions in one block with no dependency on each other keep whatever order
the provider returns. The depth-first provider leaves them in primary-sort order.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import cmp_to_key
from typing import Iterable

from .config import CONFIG, OrderingConfig
from .errors import DependencyCycleError, ValidationError
from .models import Transaction
from .toposort import CycleError, OrderProvider, get_provider

logger = logging.getLogger(__name__)

CYCLE_POLICIES = ("raise", "keep")


def compare_transactions(a: Transaction, b: Transaction, ascending: bool = False) -> int:
    """Three-way comparison; a negative result shows ``a`` first."""
    x, y = (a, b) if ascending else (b, a)
    if x.status.confirmed and y.status.confirmed:
        return x.status.block_height - y.status.block_height
    if x.status.confirmed or y.status.confirmed:
        return 1 if x.status.confirmed else -1
    return x.first_seen - y.first_seen


def same_block_ranges(transactions: list[Transaction]) -> list[tuple[int, int]]:
    """Half-open ``[start, end)`` ranges of two or more same-height transactions.

    Expects confirmed transactions to be grouped by height already, which is
    what the primary sort leaves behind. Unconfirmed entries are skipped.
    """
    ranges: list[tuple[int, int]] = []
    previous_height: int | None = None
    run_start: int | None = None
    run_end = 0

    for i, tx in enumerate(transactions):
        if not tx.status.confirmed:
            continue
        height = tx.status.block_height
        if run_start is not None and height == previous_height:
            run_end = i + 1
        else:
            if run_start is not None and run_end - run_start > 1:
                ranges.append((run_start, run_end))
            run_start, run_end = i, i + 1
        previous_height = height

    if run_start is not None and run_end - run_start > 1:
        ranges.append((run_start, run_end))
    return ranges


def _dependency_edges(txs: list[Transaction], ascending: bool) -> list[tuple[str, str]]:
    edges: list[tuple[str, str]] = []
    for tx in txs:
        for parent in tx.parent_txids():
            edges.append((parent, tx.txid) if ascending else (tx.txid, parent))
    return edges


def sort_same_block_range(
    transactions: list[Transaction],
    start: int,
    end: int,
    ascending: bool = False,
    provider: OrderProvider | None = None,
    cycle_policy: str = "raise",
) -> None:
    if cycle_policy not in CYCLE_POLICIES:
        raise ValidationError(f"Unknown cycle policy '{cycle_policy}'")
    if end - start < 2:
        return

    provider = provider or get_provider(CONFIG.order_provider)
    txs = transactions[start:end]
    txids = [tx.txid for tx in txs]
    by_txid: dict[str, Transaction] = {tx.txid: tx for tx in txs}
    if len(by_txid) != len(txs):
        raise ValidationError(f"Duplicate txid in block {txs[0].block_height}")

    edges = _dependency_edges(txs, ascending)
    try:
        ordered = provider.order(edges, nodes=txids)
    except CycleError as exc:
        cycle = [str(node) for node in exc.nodes if node in by_txid]
        if cycle_policy == "raise":
            raise DependencyCycleError(txs[0].block_height, cycle) from exc
        logger.warning(
            "Cyclic spends in block, keeping primary order",
            extra={
                "event": "ordering.cycle_kept",
                "block_height": txs[0].block_height,
                "txids": cycle,
            },
        )
        return

    ordered = [txid for txid in ordered if txid in by_txid]
    if len(ordered) != len(txs):
        raise ValidationError(
            f"Order provider returned {len(ordered)} of {len(txs)} transactions for block {txs[0].block_height}"
        )

    for index, txid in enumerate(ordered):
        transactions[start + index] = by_txid[txid]

    logger.debug(
        "Resolved same-block range",
        extra={
            "event": "ordering.range_resolved",
            "block_height": txs[0].block_height,
            "start": start,
            "end": end,
            "edges": len(edges),
        },
    )


def sort_transactions(
    transactions: list[Transaction],
    ascending: bool | None = None,
    provider: OrderProvider | None = None,
    config: OrderingConfig = CONFIG,
) -> None:
    """Sort ``transactions`` in place for display.

    ``ascending`` and ``provider`` default to ``config.ascending`` and
    ``config.order_provider``. Raises ``ValidationError`` on malformed input
    and ``DependencyCycleError`` on cyclic spends unless the config says
    ``cycle_policy="keep"``.
    """
    if ascending is None:
        ascending = config.ascending
    if provider is None:
        provider = get_provider(config.order_provider)
    if config.cycle_policy not in CYCLE_POLICIES:
        raise ValidationError(f"Unknown cycle policy '{config.cycle_policy}'")

    if config.validate_input:
        for tx in transactions:
            tx.validate()

    transactions.sort(key=cmp_to_key(lambda a, b: compare_transactions(a, b, ascending)))

    ranges = same_block_ranges(transactions)
    for start, end in ranges:
        sort_same_block_range(
            transactions,
            start,
            end,
            ascending=ascending,
            provider=provider,
            cycle_policy=config.cycle_policy,
        )

    logger.debug(
        "Sorted transactions",
        extra={
            "event": "ordering.sorted",
            "count": len(transactions),
            "ranges": len(ranges),
            "ascending": ascending,
            "provider": provider.name,
        },
    )


def sorted_transactions(
    transactions: Iterable[Transaction],
    ascending: bool | None = None,
    provider: OrderProvider | None = None,
    config: OrderingConfig = CONFIG,
) -> list[Transaction]:
    result = list(transactions)
    sort_transactions(result, ascending=ascending, provider=provider, config=config)
    return result


def find_order_violations(
    transactions: list[Transaction],
    ascending: bool = False,
) -> list[tuple[str, str]]:
    """``(spender, parent)`` pairs shown on the wrong side of each other.

    Only pairs confirmed at the same height are checked.
    """
    position: dict[str, int] = {}
    for index, tx in enumerate(transactions):
        position.setdefault(tx.txid, index)

    violations: list[tuple[str, str]] = []
    for index, tx in enumerate(transactions):
        if not tx.status.confirmed:
            continue
        for parent_txid in tx.parent_txids():
            parent_index = position.get(parent_txid)
            if parent_index is None or parent_index == index:
                continue
            parent = transactions[parent_index]
            if not parent.status.confirmed or parent.status.block_height != tx.status.block_height:
                continue
            if (parent_index > index) if ascending else (parent_index < index):
                violations.append((tx.txid, parent_txid))
    return violations


def with_overrides(config: OrderingConfig = CONFIG, **changes) -> OrderingConfig:
    changes = {key: value for key, value in changes.items() if value is not None}
    config = replace(config, **changes)
    if config.cycle_policy not in CYCLE_POLICIES:
        raise ValidationError(f"Unknown cycle policy '{config.cycle_policy}'")
    return config
