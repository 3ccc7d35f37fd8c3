"""
Runtime configuration for a pair.

Defaults reproduce the classic constant-product pair: 0.3% input fee, a
1/6 protocol cut of invariant growth and 1000 units of locked liquidity.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from ..kernels.python.fixed_point_v1 import MAX_U256
from ..kernels.python.pair_math_v1 import (
    MINIMUM_LIQUIDITY,
    PROTOCOL_FEE_DIVISOR,
    SWAP_FEE_DENOMINATOR,
    SWAP_FEE_NUMERATOR,
)


MAX_BALANCE = (1 << 112) - 1
MAX_NATIVE_BALANCE = (1 << 64) - 1


@dataclass(frozen=True)
class PairConfig:
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    swap_fee_numerator: int = SWAP_FEE_NUMERATOR
    swap_fee_denominator: int = SWAP_FEE_DENOMINATOR
    protocol_fee_divisor: int = PROTOCOL_FEE_DIVISOR
    max_balance: int = MAX_BALANCE
    max_native_balance: int = MAX_NATIVE_BALANCE
    # Evaluate ledger invariants after every state-changing call.
    check_invariants: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            v = getattr(self, f.name)
            if f.name == "check_invariants":
                if not isinstance(v, bool):
                    raise TypeError("check_invariants must be a bool")
                continue
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{f.name} must be an int")
            if v < 0:
                raise ValueError(f"{f.name} must be non-negative: {v}")
        if self.minimum_liquidity <= 0:
            raise ValueError("minimum_liquidity must be positive")
        if self.swap_fee_denominator <= 0 or self.swap_fee_numerator >= self.swap_fee_denominator:
            raise ValueError("swap fee must satisfy 0 <= numerator < denominator")
        if self.protocol_fee_divisor <= 0:
            raise ValueError("protocol_fee_divisor must be positive")
        if not (0 < self.max_balance <= MAX_U256):
            raise ValueError("max_balance must be in (0, MAX_U256]")
        if not (0 < self.max_native_balance <= MAX_U256):
            raise ValueError("max_native_balance must be in (0, MAX_U256]")
        # Reserve products must stay inside the u256 domain used by sqrt.
        if self.max_balance * self.max_balance > MAX_U256:
            raise ValueError("max_balance squared must fit in u256")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PairConfig":
        """Build a config from a mapping; unknown keys are rejected."""
        if not isinstance(data, Mapping):
            raise TypeError("pair config must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown pair config keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PairConfig":
        """
        Load a config from YAML. An optional top-level `pair:` section is
        accepted so the file can be shared with other settings.
        """
        obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
        if obj is None:
            return cls()
        if isinstance(obj, Mapping) and "pair" in obj:
            obj = obj["pair"]
        return cls.from_mapping(obj)
