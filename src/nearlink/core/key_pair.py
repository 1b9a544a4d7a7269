"""Ed25519 key pair value used as an account credential."""

from dataclasses import dataclass, field

import base58
from nacl.exceptions import CryptoError
from nacl.signing import SigningKey

SEED_LENGTH = 32


@dataclass(frozen=True)
class KeyPair:
    """Public/secret key material for one account.

    Both keys are base58 strings. The secret key is the 64-byte ed25519
    secret (seed followed by public key). Equality is structural.

    Attributes
    ----------
    public_key : str
        Base58-encoded public key.
    secret_key : str
        Base58-encoded secret key. Never shown in ``repr()``.
    """

    public_key: str
    secret_key: str = field(repr=False)

    @staticmethod
    def from_random() -> "KeyPair":
        """Generate a new random key pair.

        Returns
        -------
        KeyPair
            A freshly generated ed25519 key pair.
        """
        signing_key = SigningKey.generate()
        public = signing_key.verify_key.encode()
        return KeyPair(
            public_key=base58.b58encode(public).decode("ascii"),
            secret_key=base58.b58encode(signing_key.encode() + public).decode("ascii"),
        )

    def sign(self, data: bytes) -> str:
        """Sign data with the secret key.

        Parameters
        ----------
        data : bytes
            The message to sign.

        Returns
        -------
        str
            Base58-encoded detached signature.

        Raises
        ------
        ValueError
            If the secret key is not a valid base58 ed25519 secret.
        """
        try:
            raw = base58.b58decode(self.secret_key)
        except ValueError as e:
            raise ValueError(f"Secret key is not valid base58: {e}") from None
        if len(raw) < SEED_LENGTH:
            raise ValueError(f"Secret key too short: {len(raw)} bytes")
        try:
            signed = SigningKey(raw[:SEED_LENGTH]).sign(data)
        except CryptoError as e:
            raise ValueError(f"Secret key rejected: {e}") from e
        return base58.b58encode(signed.signature).decode("ascii")
