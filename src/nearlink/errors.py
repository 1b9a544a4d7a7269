"""Error kinds surfaced by NEARLINK.

Each failure mode has its own exception type so calling code can branch on
"missing key" vs "storage corrupt" vs "network down" vs "node rejected".
"""

from typing import Any


class NearlinkError(Exception):
    """Base class for all NEARLINK errors."""


class KeyStoreError(NearlinkError):
    """Base class for key store lookup failures.

    Parameters
    ----------
    account_id : str
        The account the lookup was for.
    network_id : str
        The network the lookup was for.
    reason : str
        Human-readable description of the failure.
    """

    def __init__(self, account_id: str, network_id: str, reason: str):
        super().__init__(reason)
        self.account_id = account_id
        self.network_id = network_id
        self.reason = reason


class KeyNotFoundError(KeyStoreError):
    """No credential is stored for the (account, network) pair."""

    def __init__(self, account_id: str, network_id: str):
        super().__init__(
            account_id,
            network_id,
            f"Key lookup failed for {account_id!r} on network {network_id!r}. "
            "Please make sure you set up an account.",
        )


class MalformedRecordError(KeyStoreError):
    """A stored record exists but cannot be turned into a key pair."""

    def __init__(self, account_id: str, network_id: str, problem: str):
        super().__init__(
            account_id,
            network_id,
            f"Key record for {account_id!r} on network {network_id!r} is malformed: {problem}",
        )
        self.problem = problem


class TransportError(NearlinkError):
    """The node could not be reached or its reply could not be read.

    Parameters
    ----------
    method : str
        The RPC method being called.
    message : str
        Description of the failure.
    """

    def __init__(self, method: str, message: str):
        super().__init__(f"{method}: {message}")
        self.method = method


class NodeError(NearlinkError):
    """The node processed the request and returned an explicit failure.

    Parameters
    ----------
    method : str
        The RPC method being called.
    message : str
        The node's error message.
    status : int | None
        HTTP status of the reply, if any.
    payload : Any
        The decoded error document, if the node sent one.
    """

    def __init__(
        self,
        method: str,
        message: str,
        status: int | None = None,
        payload: Any = None,
    ):
        prefix = f"{status}: " if status is not None else ""
        super().__init__(f"{method}: {prefix}{message}")
        self.method = method
        self.status = status
        self.payload = payload
