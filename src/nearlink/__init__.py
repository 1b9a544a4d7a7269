"""NEARLINK - key store and transaction bridge for ledger nodes."""

from .blockchain import NodeClient, NodeConnection
from .config import KeyStoreBackend, NearlinkConfig
from .core import (
    FileSystemKeyStore,
    KeyPair,
    KeyStore,
    KeyStoreSigner,
    LocalStorageKeyStore,
    Signer,
    create_key_store,
)
from .errors import (
    KeyNotFoundError,
    KeyStoreError,
    MalformedRecordError,
    NearlinkError,
    NodeError,
    TransportError,
)
from .near import Near

__all__ = [
    "FileSystemKeyStore",
    "KeyNotFoundError",
    "KeyPair",
    "KeyStore",
    "KeyStoreBackend",
    "KeyStoreError",
    "KeyStoreSigner",
    "LocalStorageKeyStore",
    "MalformedRecordError",
    "Near",
    "NearlinkConfig",
    "NearlinkError",
    "NodeClient",
    "NodeConnection",
    "NodeError",
    "Signer",
    "TransportError",
    "create_key_store",
]
