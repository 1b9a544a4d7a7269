"""Node integration for NEARLINK."""

from .client import NodeClient
from .connection import NodeConnection

__all__ = ["NodeClient", "NodeConnection"]
