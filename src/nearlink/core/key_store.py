"""Key store abstraction and its storage backends.

A key store maps (network_id, account_id) to one key record. Writes
overwrite (last-write-wins) and records never expire.

Backends:
- FileSystemKeyStore: one JSON file per key under an explicit directory
- LocalStorageKeyStore: JSON strings in a local key/value table
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from nearlink.config import KeyStoreBackend, NearlinkConfig
from nearlink.core.key_pair import KeyPair
from nearlink.errors import KeyNotFoundError, MalformedRecordError
from nearlink.observability.metrics import KEY_STORE_OPERATIONS

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("public_key", "secret_key", "account_id")

# Prefix for entries owned by LocalStorageKeyStore
STORAGE_PREFIX = "nearlink:keystore:"


def validate_ids(account_id: str, network_id: str) -> None:
    """Check that identifiers can be encoded as ``{network_id}_{account_id}``.

    Raises
    ------
    ValueError
        If either identifier is empty or contains a forbidden character.
    """
    if not network_id:
        raise ValueError("network_id must not be empty")
    if "_" in network_id or "/" in network_id or "\\" in network_id:
        raise ValueError(f"network_id must not contain '_', '/' or '\\': {network_id!r}")
    if network_id.startswith("."):
        raise ValueError(f"network_id must not start with '.': {network_id!r}")
    if not account_id:
        raise ValueError("account_id must not be empty")
    if "/" in account_id or "\\" in account_id or account_id in (".", ".."):
        raise ValueError(f"Invalid account_id: {account_id!r}")


def record_key(account_id: str, network_id: str) -> str:
    """Name under which a record is stored."""
    return f"{network_id}_{account_id}"


def encode_record(account_id: str, key_pair: KeyPair, network_id: str) -> str:
    """Serialize a key record to its persisted JSON form."""
    return json.dumps(
        {
            "public_key": key_pair.public_key,
            "secret_key": key_pair.secret_key,
            "account_id": account_id,
            "network_id": network_id,
        }
    )


def decode_record(content: str | bytes, account_id: str, network_id: str) -> KeyPair:
    """Parse a persisted key record.

    Raises
    ------
    MalformedRecordError
        If the content is not a JSON object holding non-empty
        ``public_key``, ``secret_key`` and ``account_id`` strings.
    """
    try:
        data: Any = json.loads(content)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedRecordError(account_id, network_id, f"invalid JSON ({e})") from e

    if not isinstance(data, dict):
        raise MalformedRecordError(account_id, network_id, "record is not a JSON object")

    missing = [
        name
        for name in REQUIRED_FIELDS
        if not isinstance(data.get(name), str) or not data[name]
    ]
    if missing:
        raise MalformedRecordError(
            account_id,
            network_id,
            f"missing {', '.join(missing)}; the record must contain "
            "public_key, secret_key, and account_id",
        )

    return KeyPair(public_key=data["public_key"], secret_key=data["secret_key"])


class KeyStore(ABC):
    """Storage of account key pairs, scoped by network."""

    backend_name = "abstract"

    @abstractmethod
    async def set_key(self, account_id: str, key_pair: KeyPair, network_id: str) -> None:
        """Store a key, replacing any previous key for the pair.

        Parameters
        ----------
        account_id : str
            The account the key belongs to.
        key_pair : KeyPair
            The key material.
        network_id : str
            The network the key applies to.
        """
        ...

    @abstractmethod
    async def get_key(self, account_id: str, network_id: str) -> KeyPair:
        """Get the key for an account on a network.

        Returns
        -------
        KeyPair
            The stored key pair.

        Raises
        ------
        KeyNotFoundError
            If no key is stored for the pair.
        MalformedRecordError
            If the stored record is corrupt.
        """
        ...

    @abstractmethod
    async def get_account_ids(self, network_id: str) -> list[str]:
        """List account ids that have a key on the network.

        Returns
        -------
        list[str]
            Account ids, empty if none are stored.
        """
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Drop in-process state held by the store."""
        ...

    def _count(self, operation: str, outcome: str) -> None:
        KEY_STORE_OPERATIONS.labels(
            backend=self.backend_name, operation=operation, outcome=outcome
        ).inc()


class FileSystemKeyStore(KeyStore):
    """Unencrypted key store with one file per key.

    Keys live at ``{key_dir}/{network_id}_{account_id}``. The directory is
    created on the first write.

    Parameters
    ----------
    key_dir : str | Path
        Directory holding the key files.
    """

    backend_name = "file"

    def __init__(self, key_dir: str | Path):
        self._key_dir = Path(key_dir).expanduser()

    @property
    def key_dir(self) -> Path:
        """Directory holding the key files."""
        return self._key_dir

    def get_key_file_path(self, account_id: str, network_id: str) -> Path:
        """Path of the key file for an account on a network."""
        return self._key_dir / record_key(account_id, network_id)

    async def set_key(self, account_id: str, key_pair: KeyPair, network_id: str) -> None:
        validate_ids(account_id, network_id)
        key_path = self.get_key_file_path(account_id, network_id)
        self._key_dir.mkdir(parents=True, exist_ok=True)

        # Temp file in the same directory so the rename is atomic
        fd, temp_path = tempfile.mkstemp(dir=self._key_dir, prefix=".nearlink-key-")
        fd_closed = False
        try:
            os.fchmod(fd, 0o600)
            os.write(fd, encode_record(account_id, key_pair, network_id).encode("utf-8"))
            os.close(fd)
            fd_closed = True
            os.replace(temp_path, key_path)
        except Exception:
            if not fd_closed:
                os.close(fd)
            Path(temp_path).unlink(missing_ok=True)
            self._count("set_key", "error")
            raise

        self._count("set_key", "ok")
        logger.debug(
            "Key stored",
            extra={
                "account_id": account_id,
                "network_id": network_id,
                "path": str(key_path),
            },
        )

    async def get_key(self, account_id: str, network_id: str) -> KeyPair:
        validate_ids(account_id, network_id)
        key_path = self.get_key_file_path(account_id, network_id)
        if not key_path.is_file():
            self._count("get_key", "key_not_found")
            raise KeyNotFoundError(account_id, network_id)

        try:
            try:
                content = key_path.read_bytes()
            except OSError as e:
                raise MalformedRecordError(
                    account_id, network_id, f"unreadable key file: {e}"
                ) from e
            key_pair = decode_record(content, account_id, network_id)
        except MalformedRecordError:
            self._count("get_key", "malformed_record")
            logger.warning(
                "Malformed key file",
                extra={"account_id": account_id, "network_id": network_id, "path": str(key_path)},
            )
            raise

        self._count("get_key", "ok")
        return key_pair

    async def get_account_ids(self, network_id: str) -> list[str]:
        if not self._key_dir.is_dir():
            return []

        prefix = f"{network_id}_"
        result = []
        for entry in sorted(self._key_dir.iterdir(), key=lambda p: p.name):
            name = entry.name
            # Skip temp files and anything not following the naming convention
            if name.startswith(".") or not name.startswith(prefix):
                continue
            account_id = name[len(prefix) :]
            if not account_id or not entry.is_file():
                continue
            result.append(account_id)
        return result

    async def clear(self) -> None:
        # Holds no in-process state; files on disk are left in place.
        logger.debug("File key store cleared", extra={"path": str(self._key_dir)})


class LocalStorageKeyStore(KeyStore):
    """Key store over a local key/value table of strings.

    Records are stored as ``nearlink:keystore:{network_id}_{account_id}``
    with the same JSON document the file store writes.

    Parameters
    ----------
    storage : MutableMapping[str, str] | None
        The backing table. A new in-memory dict is used if None.
    """

    backend_name = "local_storage"

    def __init__(self, storage: MutableMapping[str, str] | None = None):
        self._storage: MutableMapping[str, str] = storage if storage is not None else {}

    @staticmethod
    def storage_key(account_id: str, network_id: str) -> str:
        """Key of the storage entry for an account on a network."""
        return STORAGE_PREFIX + record_key(account_id, network_id)

    async def set_key(self, account_id: str, key_pair: KeyPair, network_id: str) -> None:
        validate_ids(account_id, network_id)
        self._storage[self.storage_key(account_id, network_id)] = encode_record(
            account_id, key_pair, network_id
        )
        self._count("set_key", "ok")
        logger.debug(
            "Key stored",
            extra={"account_id": account_id, "network_id": network_id},
        )

    async def get_key(self, account_id: str, network_id: str) -> KeyPair:
        validate_ids(account_id, network_id)
        content = self._storage.get(self.storage_key(account_id, network_id))
        if content is None:
            self._count("get_key", "key_not_found")
            raise KeyNotFoundError(account_id, network_id)

        try:
            key_pair = decode_record(content, account_id, network_id)
        except MalformedRecordError:
            self._count("get_key", "malformed_record")
            logger.warning(
                "Malformed key record",
                extra={"account_id": account_id, "network_id": network_id},
            )
            raise

        self._count("get_key", "ok")
        return key_pair

    async def get_account_ids(self, network_id: str) -> list[str]:
        prefix = STORAGE_PREFIX + f"{network_id}_"
        return [
            key[len(prefix) :]
            for key in list(self._storage.keys())
            if key.startswith(prefix) and len(key) > len(prefix)
        ]

    async def clear(self) -> None:
        owned = [key for key in list(self._storage.keys()) if key.startswith(STORAGE_PREFIX)]
        for key in owned:
            del self._storage[key]
        logger.debug("Local storage key store cleared", extra={"removed": len(owned)})


def create_key_store(config: NearlinkConfig) -> KeyStore:
    """Build the key store selected by configuration.

    Parameters
    ----------
    config : NearlinkConfig
        Loaded configuration.

    Returns
    -------
    KeyStore
        The configured backend.
    """
    if config.key_store == KeyStoreBackend.FILE:
        return FileSystemKeyStore(config.key_dir)
    if config.key_store == KeyStoreBackend.LOCAL_STORAGE:
        return LocalStorageKeyStore()
    raise ValueError(f"Unsupported key store backend: {config.key_store!r}")
