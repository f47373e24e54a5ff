"""Blockchain read endpoint access.

The only I/O in movegov: fetching normalized module descriptors over
JSON-RPC before the pure analysis pipeline runs.
"""

from movegov.rpc.client import SuiRPCClient

__all__ = ["SuiRPCClient"]
