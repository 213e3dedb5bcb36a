import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from techpedia.core.config import get_settings
from techpedia.core.errors import Unauthorized
from techpedia.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    token_expiry,
    verify_password,
)

settings = get_settings()


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse", rounds=4)

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_cost_factor_is_encoded_in_hash(self):
        assert hash_password("pw", rounds=5).startswith("$2b$05$")

    def test_malformed_hash_does_not_verify(self):
        assert not verify_password("pw", "not-a-bcrypt-hash")


class TestTokens:
    def test_access_token_claims(self):
        user_id = uuid.uuid4()

        payload = decode_token(create_access_token(user_id, "a@example.com", "CUSTOMER"))

        assert payload["sub"] == str(user_id)
        assert payload["role"] == "CUSTOMER"
        assert payload["type"] == "access"

    def test_tokens_are_unique(self):
        user_id = uuid.uuid4()

        assert create_refresh_token(user_id) != create_refresh_token(user_id)

    def test_refresh_token_uses_its_own_secret(self):
        token = create_refresh_token(uuid.uuid4())

        assert decode_token(token, REFRESH_TOKEN)["type"] == "refresh"
        with pytest.raises(Unauthorized):
            decode_token(token)

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "type": "access", "exp": int(past.timestamp())},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALG,
        )

        with pytest.raises(Unauthorized):
            decode_token(token)

    def test_token_expiry_is_aware_utc(self):
        payload = decode_token(create_access_token(uuid.uuid4(), "a@example.com", "ADMIN"))

        expiry = token_expiry(payload)

        assert expiry.tzinfo is timezone.utc
        assert expiry > datetime.now(timezone.utc)
