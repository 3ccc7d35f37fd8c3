"""
Host integration layer (caller context, balance oracle, transfers)
"""

from .host import AssetHost, CallContext, LocalChain, TransferError

__all__ = [
    "AssetHost",
    "CallContext",
    "LocalChain",
    "TransferError",
]
