"""
Tests for password hashing, the password policy and bearer tokens.
"""

from datetime import timedelta

import jwt
import pytest

from swiftgate.errors import InvalidToken
from swiftgate.security import (
    hash_password,
    is_valid_password,
    issue_token,
    validate_token,
    verify_password,
)


class TestPasswordPolicy:

    @pytest.mark.parametrize("password", ["Passw0rd!", "Employee1Pass#", "aB3$efgh", "Password1é"])
    def test_accepts_compliant_passwords(self, password):
        assert is_valid_password(password)

    @pytest.mark.parametrize("password", [
        "Pa0!",            # too short
        "password1!",      # no uppercase
        "PASSWORD1!",      # no lowercase
        "Password!!",      # no digit
        "Password11",      # no symbol
        "Password١!",      # only a non-ASCII digit
        "",
        None,
    ])
    def test_rejects_weak_passwords(self, password):
        assert not is_valid_password(password)


class TestPasswordHashing:

    def test_round_trip(self):
        stored = hash_password("Passw0rd!", rounds=4)
        assert stored != "Passw0rd!"
        assert verify_password("Passw0rd!", stored)

    @pytest.mark.parametrize("mutated", ["Passw0rd", "passw0rd!", "Passw0rd!!", "Passw1rd!"])
    def test_mutated_password_fails(self, mutated):
        stored = hash_password("Passw0rd!", rounds=4)
        assert not verify_password(mutated, stored)

    def test_hashes_are_salted(self):
        assert hash_password("Passw0rd!", rounds=4) != hash_password("Passw0rd!", rounds=4)

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("Passw0rd!", "not-a-bcrypt-hash") is False

    def test_long_passwords_do_not_raise(self):
        long_password = "Aa1!" * 30
        stored = hash_password(long_password, rounds=4)
        assert verify_password(long_password, stored)


class TestTokens:

    def test_issue_then_validate(self, settings):
        token = issue_token(settings, {"id": "abc", "accountNumber": "998877", "role": "customer"})
        claims = validate_token(settings, token)
        assert claims["id"] == "abc"
        assert claims["accountNumber"] == "998877"
        assert claims["exp"] - claims["iat"] == 3600

    def test_missing_token(self, settings):
        with pytest.raises(InvalidToken, match="missing"):
            validate_token(settings, None)

    def test_garbage_token(self, settings):
        with pytest.raises(InvalidToken):
            validate_token(settings, "not.a.token")

    def test_expired_token(self, settings):
        token = issue_token(settings, {"id": "abc", "accountNumber": "1"}, ttl=timedelta(seconds=-5))
        with pytest.raises(InvalidToken, match="expired"):
            validate_token(settings, token)

    def test_wrong_signature(self, settings):
        forged = jwt.encode({"id": "abc", "accountNumber": "1"}, "other-secret", algorithm="HS256")
        with pytest.raises(InvalidToken):
            validate_token(settings, forged)

    def test_token_without_identity(self, settings):
        token = issue_token(settings, {"role": "customer"})
        with pytest.raises(InvalidToken):
            validate_token(settings, token)
