# -*- coding: utf-8 -*-
"""
backend/tests/shared/utils/test_security_hashing.py

Tests de hashing moderno (Argon2id), verificación legacy y tokens.

Autor: Ixchel Beristain
Fecha: 2025-10-18
"""

from passlib.hash import bcrypt as bcrypt_hash
from passlib.hash import pbkdf2_sha256

import pytest

from app.shared.utils.security import (
    MAX_PASSWORD_LENGTH,
    PasswordTooLongError,
    generate_session_token,
    hash_token,
    legacy_hasher,
    modern_hasher,
)


class TestModernHashing:
    def test_argon2id_roundtrip(self):
        hashed = modern_hasher.hash("S3guro!")
        assert hashed.startswith("$argon2id$")
        assert modern_hasher.verify("S3guro!", hashed) is True
        assert modern_hasher.verify("otro", hashed) is False

    def test_too_long_password_is_rejected(self):
        with pytest.raises(PasswordTooLongError):
            modern_hasher.hash("x" * (MAX_PASSWORD_LENGTH + 1))


class TestLegacyVerification:
    @pytest.mark.parametrize(
        "hashed",
        [
            bcrypt_hash.using(rounds=4).hash("legacy-pw"),
            pbkdf2_sha256.using(rounds=1000).hash("legacy-pw"),
        ],
    )
    def test_supported_schemes(self, hashed):
        assert legacy_hasher.verify("legacy-pw", hashed) is True
        assert legacy_hasher.verify("nope", hashed) is False

    @pytest.mark.parametrize("hashed", [None, "", "plaintext", "$2b$garbage"])
    def test_unusable_hash_is_false(self, hashed):
        assert legacy_hasher.verify("legacy-pw", hashed) is False

    async def test_async_variant(self):
        hashed = bcrypt_hash.using(rounds=4).hash("legacy-pw")
        assert await legacy_hasher.verify_async("legacy-pw", hashed) is True


class TestSessionTokens:
    def test_tokens_are_unique_and_urlsafe(self):
        tokens = {generate_session_token() for _ in range(20)}
        assert len(tokens) == 20
        assert all("=" not in t and "+" not in t and "/" not in t for t in tokens)

    def test_hash_token_is_sha256_hex(self):
        digest = hash_token("abc")
        assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

# Fin del archivo backend/tests/shared/utils/test_security_hashing.py
