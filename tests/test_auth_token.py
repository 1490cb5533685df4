from datetime import timedelta

import pytest
try:
    from orbit_core.auth import (
        ExpiredSignatureError,
        JWTError,
        create_access_token,
        decode_token,
        hash_password,
        normalize_username,
        verify_password,
    )
except Exception as e:  # pragma: no cover
    pytest.skip(f"auth tests skipped (import error: {e})", allow_module_level=True)


def test_token_round_trip():
    token = create_access_token({"sub": "tester"})
    payload = decode_token(token)
    assert payload["sub"] == "tester"


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "tester"}, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ExpiredSignatureError):
        decode_token(token)


def test_tampered_token_is_rejected():
    token = create_access_token({"sub": "tester"})
    with pytest.raises(JWTError):
        decode_token(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))


def test_password_hash_verify():
    pw = "s3cret!"
    hashed = hash_password(pw)
    assert verify_password(pw, hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password(pw, "not-a-hash")


def test_normalize_username():
    assert normalize_username("  Arihant ") == "arihant"
