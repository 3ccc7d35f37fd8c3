"""
Production Python kernels.

These modules are designed to be:
- deterministic (integer-only),
- explicit about their domain (u256 ceilings are checked, not assumed),
- small surface-area (pure functions, typed results).
"""
