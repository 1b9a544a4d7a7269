"""CLI subcommands for NEARLINK.

Provides command-line interface for:
- Key operations (list, show, add, generate)
- Contract operations (view, call, deploy)
- Transaction status polling (tx-status)
"""

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from nearlink.config import NearlinkConfig
from nearlink.core.key_pair import KeyPair
from nearlink.core.key_store import KeyStore, create_key_store
from nearlink.errors import NearlinkError
from nearlink.near import Near
from nearlink.observability.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    set_request_id,
)

logger = get_logger(__name__)

# Errors reported to the user as {"error": ...} with exit code 1
CLI_ERRORS = (NearlinkError, ValueError, OSError)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="nearlink",
        description="NEARLINK - key store and transaction bridge for ledger nodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global flags
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "--network",
        metavar="NETWORK_ID",
        help="Network ID (overrides NEARLINK_NETWORK_ID)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Keys subcommand
    keys_parser = subparsers.add_parser("keys", help="Key store operations")
    keys_sub = keys_parser.add_subparsers(dest="keys_command")

    keys_sub.add_parser("list", help="List accounts with a key on the network")

    show_parser = keys_sub.add_parser("show", help="Show the public key of an account")
    show_parser.add_argument("account_id", type=str, help="Account ID")

    add_parser = keys_sub.add_parser("add", help="Import an existing key")
    add_parser.add_argument("account_id", type=str, help="Account ID")
    add_parser.add_argument("public_key", type=str, help="Base58 public key")
    add_parser.add_argument(
        "--secret-key-file",
        required=True,
        help="File containing the base58 secret key",
    )

    generate_parser = keys_sub.add_parser("generate", help="Generate and store a new key")
    generate_parser.add_argument("account_id", type=str, help="Account ID")

    # View subcommand
    view_parser = subparsers.add_parser("view", help="Call a view function")
    view_parser.add_argument("contract", type=str, help="Contract account ID")
    view_parser.add_argument("method", type=str, help="Method name")
    view_parser.add_argument("--args", default="{}", help="Arguments as a JSON object")
    view_parser.add_argument("--sender", help="Originator (default: the contract)")

    # Call subcommand
    call_parser = subparsers.add_parser("call", help="Schedule a function call")
    call_parser.add_argument("contract", type=str, help="Contract account ID")
    call_parser.add_argument("method", type=str, help="Method name")
    call_parser.add_argument("--sender", required=True, help="Signing account ID")
    call_parser.add_argument("--args", default="{}", help="Arguments as a JSON object")
    call_parser.add_argument("--amount", type=int, default=0, help="Amount to attach (default: 0)")

    # Deploy subcommand
    deploy_parser = subparsers.add_parser("deploy", help="Deploy contract bytecode")
    deploy_parser.add_argument("contract", type=str, help="Contract account ID")
    deploy_parser.add_argument("wasm_file", type=str, help="Path to the .wasm file")
    deploy_parser.add_argument("--sender", required=True, help="Signing account ID")
    deploy_parser.add_argument(
        "--public-key",
        help="Public key for the contract account (default: the sender's key)",
    )

    # Transaction status subcommand
    status_parser = subparsers.add_parser("tx-status", help="Show transaction status")
    status_parser.add_argument("hash", type=str, help="Transaction hash")

    return parser


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(self, config: NearlinkConfig, json_output: bool = False):
        self.config = config
        self.json_output = json_output
        self._key_store: KeyStore | None = None
        self._near: Near | None = None

    @property
    def network_id(self) -> str:
        """Network the command operates on."""
        return self.config.network_id

    @property
    def key_store(self) -> KeyStore:
        """Get key store (lazy loaded, shared with the facade's signer)."""
        if self._key_store is None:
            self._key_store = create_key_store(self.config)
        return self._key_store

    @property
    def near(self) -> Near:
        """Get facade (lazy loaded)."""
        if self._near is None:
            self._near = Near.from_config(self.config, key_store=self.key_store)
        return self._near

    async def close(self) -> None:
        """Release network resources."""
        if self._near is not None:
            await self._near.close()
            self._near = None

    def output(self, data: dict) -> None:
        """Output data in the appropriate format."""
        if self.json_output:
            print(json.dumps(data, indent=2, default=str))
        else:
            self._print_formatted(data)

    def _print_formatted(self, data: dict, indent: int = 0) -> None:
        """Print data in human-readable format."""
        prefix = "  " * indent
        for key, value in data.items():
            if isinstance(value, dict):
                print(f"{prefix}{key}:")
                self._print_formatted(value, indent + 1)
            elif isinstance(value, list):
                print(f"{prefix}{key}:")
                for item in value:
                    print(f"{prefix}  - {item}")
            else:
                print(f"{prefix}{key}: {value}")


def _parse_args_json(raw: str) -> dict[str, Any]:
    """Parse a --args value into a JSON object."""
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"--args is not valid JSON: {e}") from None
    if not isinstance(value, dict):
        raise ValueError("--args must be a JSON object")
    return value


# Key commands


async def cmd_keys_list(ctx: CLIContext) -> int:
    """List accounts with a key on the network."""
    try:
        accounts = await ctx.key_store.get_account_ids(ctx.network_id)
        ctx.output({"network_id": ctx.network_id, "accounts": accounts})
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def cmd_keys_show(ctx: CLIContext, account_id: str) -> int:
    """Show an account's public key."""
    try:
        key_pair = await ctx.key_store.get_key(account_id, ctx.network_id)
        ctx.output(
            {
                "account_id": account_id,
                "network_id": ctx.network_id,
                "public_key": key_pair.public_key,
            }
        )
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def cmd_keys_add(
    ctx: CLIContext, account_id: str, public_key: str, secret_key_file: str
) -> int:
    """Import a key read from a file."""
    try:
        key_path = Path(secret_key_file).expanduser()
        if not key_path.exists():
            raise FileNotFoundError(f"Secret key file not found: {secret_key_file}")
        secret_key = key_path.read_text().strip()
        if not secret_key:
            raise ValueError(f"Secret key file is empty: {secret_key_file}")

        await ctx.key_store.set_key(account_id, KeyPair(public_key, secret_key), ctx.network_id)
        ctx.output(
            {
                "account_id": account_id,
                "network_id": ctx.network_id,
                "public_key": public_key,
                "message": "Key stored",
            }
        )
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def cmd_keys_generate(ctx: CLIContext, account_id: str) -> int:
    """Generate and store a new key pair."""
    try:
        key_pair = KeyPair.from_random()
        await ctx.key_store.set_key(account_id, key_pair, ctx.network_id)
        ctx.output(
            {
                "account_id": account_id,
                "network_id": ctx.network_id,
                "public_key": key_pair.public_key,
                "message": "Key generated and stored",
            }
        )
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


# Contract commands


async def cmd_view(
    ctx: CLIContext, contract: str, method: str, raw_args: str, sender: str | None
) -> int:
    """Call a view function."""
    try:
        args = _parse_args_json(raw_args)
        result = await ctx.near.call_view_function(sender or contract, contract, method, args)
        ctx.output({"contract": contract, "method": method, "result": result})
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def cmd_call(
    ctx: CLIContext, contract: str, method: str, sender: str, raw_args: str, amount: int
) -> int:
    """Schedule a function call."""
    try:
        if amount < 0:
            raise ValueError("Amount must not be negative")
        args = _parse_args_json(raw_args)
        result = await ctx.near.schedule_function_call(amount, sender, contract, method, args)
        ctx.output(
            {
                "contract": contract,
                "method": method,
                "sender": sender,
                "amount": amount,
                "result": result,
            }
        )
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def cmd_deploy(
    ctx: CLIContext, contract: str, wasm_file: str, sender: str, public_key: str | None
) -> int:
    """Deploy contract bytecode."""
    try:
        wasm_path = Path(wasm_file).expanduser()
        if not wasm_path.exists():
            raise FileNotFoundError(f"Contract file not found: {wasm_file}")
        wasm_bytes = wasm_path.read_bytes()

        if public_key is None:
            public_key = (await ctx.key_store.get_key(sender, ctx.network_id)).public_key

        result = await ctx.near.deploy_contract(sender, contract, wasm_bytes, public_key)
        ctx.output(
            {
                "contract": contract,
                "sender": sender,
                "size_bytes": len(wasm_bytes),
                "result": result,
            }
        )
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def cmd_tx_status(ctx: CLIContext, transaction_hash: str) -> int:
    """Show a transaction's current status."""
    try:
        status = await ctx.near.get_transaction_status(transaction_hash)
        ctx.output({"hash": transaction_hash, "status": status})
        return 0
    except CLI_ERRORS as e:
        ctx.output({"error": str(e)})
        return 1


async def _dispatch(ctx: CLIContext, args: argparse.Namespace) -> int:
    """Route parsed arguments to a command."""
    if args.command == "keys":
        if args.keys_command == "list":
            return await cmd_keys_list(ctx)
        elif args.keys_command == "show":
            return await cmd_keys_show(ctx, args.account_id)
        elif args.keys_command == "add":
            return await cmd_keys_add(ctx, args.account_id, args.public_key, args.secret_key_file)
        elif args.keys_command == "generate":
            return await cmd_keys_generate(ctx, args.account_id)
        else:
            print("Usage: nearlink keys [list|show|add|generate]", file=sys.stderr)
            return 1

    elif args.command == "view":
        return await cmd_view(ctx, args.contract, args.method, args.args, args.sender)

    elif args.command == "call":
        return await cmd_call(
            ctx, args.contract, args.method, args.sender, args.args, args.amount
        )

    elif args.command == "deploy":
        return await cmd_deploy(ctx, args.contract, args.wasm_file, args.sender, args.public_key)

    elif args.command == "tx-status":
        return await cmd_tx_status(ctx, args.hash)

    # No command specified
    return -1


async def _run(ctx: CLIContext, args: argparse.Namespace) -> int:
    set_request_id(uuid.uuid4().hex[:12])
    try:
        exit_code = await _dispatch(ctx, args)
        logger.debug("Command finished", command=args.command, exit_code=exit_code)
        return exit_code
    finally:
        await ctx.close()
        clear_request_id()


def run_cli(args: argparse.Namespace) -> int:
    """Execute CLI command based on parsed arguments.

    Returns
    -------
    int
        Exit code: 0 for success, positive for error, -1 signals caller
        to show help (no command specified).
    """
    try:
        config = NearlinkConfig()
        configure_logging(level=config.log_level, log_format=config.log_format)
    except (ValidationError, ValueError) as e:
        if args.json:
            print(json.dumps({"error": f"Configuration error: {e}"}))
        else:
            print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.network:
        config = config.model_copy(update={"network_id": args.network})

    ctx = CLIContext(config, json_output=args.json)
    return asyncio.run(_run(ctx, args))
