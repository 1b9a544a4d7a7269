"""Signer abstraction for resolving and applying account credentials."""

import hashlib
from abc import ABC, abstractmethod

from nearlink.core.key_pair import KeyPair
from nearlink.core.key_store import KeyStore


def sign_message(key_pair: KeyPair, data: bytes) -> str:
    """Sign the SHA-256 digest of data with a resolved key pair.

    Raises
    ------
    ValueError
        If the key pair's secret key cannot sign.
    """
    return key_pair.sign(hashlib.sha256(data).digest())


class Signer(ABC):
    """Abstract signer choosing the credential for a call."""

    @abstractmethod
    async def sign(self, account_id: str, network_id: str) -> KeyPair:
        """Resolve the key pair to use for an account on a network.

        Returns
        -------
        KeyPair
            The credential for the account.
        """
        ...

    async def sign_bytes(self, data: bytes, account_id: str, network_id: str) -> str:
        """Sign the SHA-256 digest of data with the account's key.

        Parameters
        ----------
        data : bytes
            The message to sign.
        account_id : str
            The signing account.
        network_id : str
            The network the account lives on.

        Returns
        -------
        str
            Base58-encoded ed25519 signature.
        """
        return sign_message(await self.sign(account_id, network_id), data)


class KeyStoreSigner(Signer):
    """Signer that takes keys from a key store.

    Lookup errors from the store (KeyNotFoundError, MalformedRecordError)
    propagate unchanged.

    Parameters
    ----------
    key_store : KeyStore
        The store to take keys from.
    """

    def __init__(self, key_store: KeyStore):
        self._key_store = key_store

    @property
    def key_store(self) -> KeyStore:
        """The bound key store."""
        return self._key_store

    async def sign(self, account_id: str, network_id: str) -> KeyPair:
        return await self._key_store.get_key(account_id, network_id)
