from dataclasses import dataclass


@dataclass(frozen=True)
class OrderingConfig:
    # Default display direction: newest block first, confirmed before mempool.
    ascending: bool = False
    # "depth-first" or "kahn", see txorder.toposort.PROVIDERS.
    order_provider: str = "depth-first"
    # "raise" propagates cyclic spends inside one block.
    # "keep" leaves that block in primary-sort order and logs a warning.
    cycle_policy: str = "raise"
    validate_input: bool = True


CONFIG = OrderingConfig()
