"""Tests for sealing Actions secrets against the repository key."""

from __future__ import annotations

import base64

import pytest
from nacl import encoding, public

from nexus_badges.errors import InvalidKey
from nexus_badges.sealing import load_public_key, seal_secret


@pytest.fixture
def keypair():
    """Provide a repository keypair and its base64 public key."""
    private_key = public.PrivateKey.generate()
    encoded = private_key.public_key.encode(encoding.Base64Encoder).decode("ascii")
    return private_key, encoded


class TestSealSecret:
    """Tests for sealed-box encryption."""

    def test_only_the_private_key_opens_it(self, keypair):
        private_key, encoded = keypair
        sealed = seal_secret("hunter2", encoded)

        opened = public.SealedBox(private_key).decrypt(base64.b64decode(sealed))
        assert opened == b"hunter2"

    def test_each_seal_is_fresh(self, keypair):
        """Sealing twice gives two ciphertexts that both open."""
        private_key, encoded = keypair
        first = seal_secret("hunter2", encoded)
        second = seal_secret("hunter2", encoded)

        assert first != second
        box = public.SealedBox(private_key)
        assert box.decrypt(base64.b64decode(first)) == box.decrypt(base64.b64decode(second))

    def test_ciphertext_is_ascii_base64(self, keypair):
        _, encoded = keypair
        sealed = seal_secret("x", encoded)
        assert base64.b64encode(base64.b64decode(sealed)).decode("ascii") == sealed


class TestLoadPublicKey:
    """Tests for decoding the repository key."""

    def test_valid_key(self, keypair):
        private_key, encoded = keypair
        assert bytes(load_public_key(encoded)) == bytes(private_key.public_key)

    def test_not_base64(self):
        with pytest.raises(InvalidKey):
            load_public_key("not base64 at all!")

    def test_wrong_length(self):
        short = base64.b64encode(b"too short").decode("ascii")
        with pytest.raises(InvalidKey):
            load_public_key(short)

    def test_seal_with_bad_key(self):
        with pytest.raises(InvalidKey):
            seal_secret("hunter2", base64.b64encode(b"\x00" * 8).decode("ascii"))
