"""Core NEARLINK components."""

from .key_pair import KeyPair
from .key_store import FileSystemKeyStore, KeyStore, LocalStorageKeyStore, create_key_store
from .signer import KeyStoreSigner, Signer, sign_message

__all__ = [
    "FileSystemKeyStore",
    "KeyPair",
    "KeyStore",
    "KeyStoreSigner",
    "LocalStorageKeyStore",
    "Signer",
    "create_key_store",
    "sign_message",
]
