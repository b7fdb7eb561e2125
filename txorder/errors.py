from __future__ import annotations


class ValidationError(Exception):
    pass


class DependencyCycleError(ValidationError):
    def __init__(self, block_height: int | None, txids: list[str]) -> None:
        self.block_height = block_height
        self.txids = list(txids)
        shown = ", ".join(self.txids[:8])
        if len(self.txids) > 8:
            shown += ", ..."
        super().__init__(f"Cyclic spends in block {block_height}: {shown}")
