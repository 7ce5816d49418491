"""
Chain reader providers.
"""

from onchain_adapters.providers.json_rpc import JsonRpcChainReader, hex_to_int


__all__ = [
    "JsonRpcChainReader",
    "hex_to_int",
]
