"""Application-facing facade for contract calls and deployment."""

import logging
from typing import Any

from nearlink.blockchain.client import NodeClient
from nearlink.blockchain.connection import NodeConnection
from nearlink.codec import decode_payload, encode_args, to_byte_list
from nearlink.config import NearlinkConfig
from nearlink.core.key_store import KeyStore, create_key_store
from nearlink.core.signer import KeyStoreSigner
from nearlink.errors import NodeError

logger = logging.getLogger(__name__)


class Near:
    """Orchestrates view calls, function calls, deployment and status polls.

    Parameters
    ----------
    client : NodeClient
        Client used to reach the node.
    network_id : str
        Network whose keys sign submitted transactions.
    """

    def __init__(self, client: NodeClient, network_id: str):
        self._client = client
        self._network_id = network_id

    @classmethod
    def from_config(cls, config: NearlinkConfig, key_store: KeyStore | None = None) -> "Near":
        """Build the default wiring from configuration.

        Parameters
        ----------
        config : NearlinkConfig
            Loaded configuration.
        key_store : KeyStore, optional
            Store to sign with. If None, one is built from ``config``.

        Returns
        -------
        Near
            Facade over the configured key store and node.
        """
        if key_store is None:
            key_store = create_key_store(config)
        signer = KeyStoreSigner(key_store)
        connection = NodeConnection(config.node_url, timeout=config.request_timeout)
        logger.info(
            "Near client configured",
            extra={
                "node_url": config.node_url,
                "network_id": config.network_id,
                "key_store": config.key_store.value,
            },
        )
        return cls(NodeClient(signer, connection), config.network_id)

    @property
    def client(self) -> NodeClient:
        """The underlying node client."""
        return self._client

    @property
    def network_id(self) -> str:
        """Network whose keys sign transactions."""
        return self._network_id

    async def call_view_function(
        self,
        sender: str,
        contract_account_id: str,
        method_name: str,
        args: dict[str, Any] | None = None,
    ) -> Any:
        """Call a view function and return the value it returns.

        The sender is informational only; nothing is signed.

        Raises
        ------
        NodeError
            If the reply does not carry a decodable ``result``.
        """
        if args is None:
            args = {}
        response = await self._client.request(
            "call_view_function",
            {
                "originator": sender,
                "contract_account_id": contract_account_id,
                "method_name": method_name,
                "args": to_byte_list(encode_args(args)),
            },
        )

        if not isinstance(response, dict) or "result" not in response:
            raise NodeError("call_view_function", "reply has no result", payload=response)
        try:
            document = decode_payload(response["result"])
        except ValueError as e:
            raise NodeError("call_view_function", str(e), payload=response) from e
        if not isinstance(document, dict) or "result" not in document:
            raise NodeError(
                "call_view_function", "view result is missing 'result'", payload=document
            )
        return document["result"]

    async def schedule_function_call(
        self,
        amount: int,
        sender: str,
        contract_account_id: str,
        method_name: str,
        args: dict[str, Any] | None = None,
        nonce: int | None = None,
    ) -> Any:
        """Schedule an asynchronous, state-changing function call.

        Returns
        -------
        Any
            The identifier the node assigns to the transaction.
        """
        if args is None:
            args = {}
        params: dict[str, Any] = {
            "amount": amount,
            "originator": sender,
            "contract_account_id": contract_account_id,
            "method_name": method_name,
            "args": to_byte_list(encode_args(args)),
        }
        if nonce is not None:
            params["nonce"] = nonce
        return await self._client.submit_transaction(
            "schedule_function_call", params, sender, self._network_id
        )

    async def deploy_contract(
        self,
        sender_account_id: str,
        contract_account_id: str,
        wasm_bytes: bytes,
        public_key: str,
        nonce: int | None = None,
    ) -> Any:
        """Deploy contract bytecode to an account."""
        params: dict[str, Any] = {
            "originator": sender_account_id,
            "contract_account_id": contract_account_id,
            "wasm_byte_array": to_byte_list(wasm_bytes),
            "public_key": public_key,
        }
        if nonce is not None:
            params["nonce"] = nonce
        return await self._client.submit_transaction(
            "deploy_contract", params, sender_account_id, self._network_id
        )

    async def get_transaction_status(self, transaction_hash: str) -> Any:
        """Poll the current status of a transaction.

        Returns the node's status record verbatim. Callers loop if they
        need to wait for finality.
        """
        return await self._client.request("get_transaction_status", {"hash": transaction_hash})

    async def view_account(self, account_id: str) -> Any:
        """Fetch an account's state."""
        return await self._client.view_account(account_id)

    async def close(self) -> None:
        """Release network resources."""
        await self._client.close()

    async def __aenter__(self) -> "Near":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
