from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationError


@dataclass
class TxStatus:
    confirmed: bool
    block_height: int | None = None
    block_hash: str = ""
    block_time: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"confirmed": self.confirmed}
        if self.confirmed:
            data["block_height"] = self.block_height
            if self.block_hash:
                data["block_hash"] = self.block_hash
            if self.block_time is not None:
                data["block_time"] = self.block_time
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TxStatus":
        confirmed = bool(data.get("confirmed", False))
        height = data.get("block_height")
        block_time = data.get("block_time")
        return cls(
            confirmed=confirmed,
            block_height=int(height) if height is not None else None,
            block_hash=str(data.get("block_hash") or ""),
            block_time=int(block_time) if block_time is not None else None,
        )


@dataclass
class TxInput:
    txid: str
    vout: int = 0
    is_coinbase: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"txid": self.txid, "vout": self.vout, "is_coinbase": self.is_coinbase}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TxInput":
        return cls(
            txid=str(data["txid"]),
            vout=int(data.get("vout", 0)),
            is_coinbase=bool(data.get("is_coinbase", False)),
        )


@dataclass
class Transaction:
    txid: str
    status: TxStatus
    first_seen: int | None = None
    inputs: list[TxInput] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "txid": self.txid,
            "status": self.status.to_dict(),
            "vin": [tx_in.to_dict() for tx_in in self.inputs],
        }
        if self.first_seen is not None:
            data["firstSeen"] = self.first_seen
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        first_seen = data.get("firstSeen", data.get("first_seen"))
        raw_inputs = data.get("vin", data.get("inputs", []))
        return cls(
            txid=str(data["txid"]),
            status=TxStatus.from_dict(data.get("status") or {}),
            first_seen=int(first_seen) if first_seen is not None else None,
            inputs=[TxInput.from_dict(item) for item in raw_inputs],
        )

    def is_confirmed(self) -> bool:
        return bool(self.status.confirmed)

    @property
    def block_height(self) -> int | None:
        return self.status.block_height if self.status.confirmed else None

    def parent_txids(self) -> list[str]:
        return [tx_in.txid for tx_in in self.inputs if not tx_in.is_coinbase]

    def validate(self) -> None:
        if not isinstance(self.txid, str) or not self.txid:
            raise ValidationError("Transaction is missing a txid")
        if self.status.confirmed:
            height = self.status.block_height
            if isinstance(height, bool) or not isinstance(height, int):
                raise ValidationError(f"Confirmed transaction {self.txid} has no block height")
            if height < 0:
                raise ValidationError(f"Confirmed transaction {self.txid} has negative block height {height}")
        else:
            seen = self.first_seen
            if isinstance(seen, bool) or not isinstance(seen, int):
                raise ValidationError(f"Unconfirmed transaction {self.txid} has no first-seen time")
