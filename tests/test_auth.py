from types import SimpleNamespace

import pytest

from helpers import make_request
from setlone.auth import Principal, RejectAllVerifier, pbkdf2_hasher, require_principal
from setlone.errors import AuthenticationError


class StaticVerifier:
    def __init__(self, tokens):
        self.tokens = tokens

    def verify(self, token):
        if token not in self.tokens:
            raise AuthenticationError("unknown token")
        return self.tokens[token]


class BrokenVerifier:
    def verify(self, token):
        raise ValueError("signature mismatch")


def app_with(verifier):
    return SimpleNamespace(state=SimpleNamespace(token_verifier=verifier))


ALICE = Principal(id=1, email="alice@example.com", username="alice")


def test_valid_bearer_token_resolves_principal():
    app = app_with(StaticVerifier({"good": ALICE}))
    request = make_request(app=app, headers={"Authorization": "Bearer good"})
    assert require_principal(request) == ALICE


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}])
def test_missing_token_is_rejected(headers):
    request = make_request(app=app_with(StaticVerifier({})), headers=headers)
    with pytest.raises(AuthenticationError) as info:
        require_principal(request)
    assert info.value.message == "No token provided"
    assert info.value.status_code == 401


@pytest.mark.parametrize("verifier", [StaticVerifier({}), BrokenVerifier(), RejectAllVerifier()])
def test_failed_verification_is_rejected(verifier):
    request = make_request(app=app_with(verifier), headers={"Authorization": "Bearer bad"})
    with pytest.raises(AuthenticationError) as info:
        require_principal(request)
    assert info.value.message == "Invalid or expired token"



def test_pbkdf2_hasher_salts_each_hash():
    first = pbkdf2_hasher("secret123", iterations=1000)
    second = pbkdf2_hasher("secret123", iterations=1000)
    assert first.startswith("pbkdf2_sha256$1000$")
    assert first != second
