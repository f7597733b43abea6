"""Uniform API access shared by the sync engine and the MCP tools."""

from .async_utils import run_sync
from .client import UniformClient
from .gateway import VendorGateway

__all__ = ["UniformClient", "VendorGateway", "run_sync"]
