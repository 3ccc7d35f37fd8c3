"""
Kernel layer.

`pairswap/kernels/python/` holds the deterministic, integer-only kernels the
pair engine is built on. They are pure functions over explicit domains and
never touch ledger state.
"""
