"""Node client for reads and signed transaction submission."""

import logging
from typing import Any

from nearlink.blockchain.connection import NodeConnection
from nearlink.codec import encode_args
from nearlink.core.signer import Signer, sign_message
from nearlink.errors import (
    KeyNotFoundError,
    MalformedRecordError,
    NodeError,
    TransportError,
)
from nearlink.observability.metrics import (
    NODE_REQUEST_DURATION,
    NODE_REQUESTS,
    TRANSACTIONS_SUBMITTED,
)

logger = logging.getLogger(__name__)


class NodeClient:
    """Request/response client for a node, with a signed-submission path.

    No caching, retries or backoff happen here: every call is a single
    round trip and every failure reaches the caller.

    Parameters
    ----------
    signer : Signer
        Resolves the credential for transaction senders.
    connection : NodeConnection
        Transport to the node.
    """

    def __init__(self, signer: Signer, connection: NodeConnection):
        self._signer = signer
        self._connection = connection

    @property
    def signer(self) -> Signer:
        """The signer used for submissions."""
        return self._signer

    async def request(self, method: str, params: dict[str, Any]) -> Any:
        """Issue a read-only query to the node.

        Parameters
        ----------
        method : str
            The RPC method name.
        params : dict[str, Any]
            The parameter document.

        Returns
        -------
        Any
            The node's decoded reply.

        Raises
        ------
        TransportError
            If the node cannot be reached.
        NodeError
            If the node returned an explicit error.
        """
        try:
            with NODE_REQUEST_DURATION.labels(method=method).time():
                result = await self._connection.request(method, params)
        except TransportError as e:
            NODE_REQUESTS.labels(method=method, outcome="transport_error").inc()
            logger.warning("Node unreachable", extra={"method": method, "error": str(e)})
            raise
        except NodeError as e:
            NODE_REQUESTS.labels(method=method, outcome="node_error").inc()
            logger.warning(
                "Node returned an error",
                extra={"method": method, "status": e.status, "error": str(e)},
            )
            raise

        NODE_REQUESTS.labels(method=method, outcome="ok").inc()
        return result

    async def submit_transaction(
        self,
        method: str,
        params: dict[str, Any],
        sender_account_id: str,
        network_id: str,
    ) -> Any:
        """Sign and submit a state-changing transaction.

        The sender's key is resolved before any network I/O, so a lookup
        failure never produces a partially sent transaction.

        Parameters
        ----------
        method : str
            The RPC method name.
        params : dict[str, Any]
            The transaction body.
        sender_account_id : str
            The account signing the transaction.
        network_id : str
            The network the sender's key belongs to.

        Returns
        -------
        Any
            The node's submission result (transaction hash or receipt).

        Raises
        ------
        KeyNotFoundError
            If no key is stored for the sender.
        MalformedRecordError
            If the sender's key record is corrupt or unusable.
        TransportError
            If the node cannot be reached.
        NodeError
            If the node rejected the transaction.
        """
        try:
            key_pair = await self._signer.sign(sender_account_id, network_id)
            body = encode_args(params)
            try:
                signature = sign_message(key_pair, body)
            except ValueError as e:
                raise MalformedRecordError(sender_account_id, network_id, str(e)) from e
        except KeyNotFoundError:
            TRANSACTIONS_SUBMITTED.labels(method=method, outcome="key_not_found").inc()
            raise
        except MalformedRecordError:
            TRANSACTIONS_SUBMITTED.labels(method=method, outcome="malformed_record").inc()
            raise

        envelope = {
            "body": params,
            "public_key": key_pair.public_key,
            "signature": signature,
        }

        try:
            result = await self.request(method, envelope)
        except TransportError:
            TRANSACTIONS_SUBMITTED.labels(method=method, outcome="transport_error").inc()
            raise
        except NodeError:
            TRANSACTIONS_SUBMITTED.labels(method=method, outcome="node_error").inc()
            raise

        TRANSACTIONS_SUBMITTED.labels(method=method, outcome="ok").inc()
        logger.info(
            "Transaction submitted",
            extra={
                "method": method,
                "sender": sender_account_id,
                "network_id": network_id,
                "public_key": key_pair.public_key,
            },
        )
        return result

    async def view_account(self, account_id: str) -> Any:
        """Fetch an account's state from the node."""
        return await self.request("view_account", {"account_id": account_id})

    async def get_nonce(self, account_id: str) -> int:
        """Next nonce for an account (current nonce + 1).

        Raises
        ------
        NodeError
            If the account state has no integer ``nonce``.
        """
        account = await self.view_account(account_id)
        nonce = account.get("nonce") if isinstance(account, dict) else None
        if not isinstance(nonce, int):
            raise NodeError("view_account", f"account {account_id!r} has no nonce", payload=account)
        return nonce + 1

    async def close(self) -> None:
        """Release the underlying connection."""
        await self._connection.close()
