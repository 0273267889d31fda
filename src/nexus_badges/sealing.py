"""
Secret sealing for GitHub Actions.

Secrets never leave the machine in the clear. GitHub publishes a
Curve25519 public key per repository; each secret is sealed against
it with a libsodium sealed box (fresh ephemeral keypair per call) so
only GitHub can open it.
"""

from __future__ import annotations

import base64

from nacl import encoding, exceptions, public

from .errors import EncryptError, InvalidKey


def load_public_key(encoded_key: str) -> public.PublicKey:
    """Decode the base64 repository key.

    Raises:
        InvalidKey: If the key is not base64 or has the wrong length.
    """
    try:
        return public.PublicKey(encoded_key.encode("utf-8"), encoding.Base64Encoder)
    except (ValueError, TypeError) as exc:
        raise InvalidKey(f"Invalid public key: {exc}") from exc


def seal_secret(secret: str, encoded_key: str) -> str:
    """Seal a secret against a repository public key.

    Args:
        secret: Plaintext secret value.
        encoded_key: Base64 public key as returned by GitHub.

    Returns:
        str: Base64 ciphertext ready for the secrets endpoint.

    Raises:
        InvalidKey: If the public key is malformed.
        EncryptError: If sealing fails.
    """
    key = load_public_key(encoded_key)
    try:
        sealed = public.SealedBox(key).encrypt(secret.encode("utf-8"))
    except exceptions.CryptoError as exc:
        raise EncryptError(f"Could not seal secret: {exc}") from exc
    return base64.b64encode(sealed).decode("ascii")
