import time

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from itsdangerous import URLSafeTimedSerializer

from qrmenu.core.config import SESSION_SECRET
from qrmenu.middleware.session import SessionMiddleware
from qrmenu.services import passwords
from qrmenu.services.sessions import SESSION_COOKIE_NAME, SESSION_SALT, create_session, decode_session


def test_session_round_trip_and_tampering():
    token = create_session(42)

    assert decode_session(token)["user_id"] == 42
    assert decode_session(token + "x") is None
    assert decode_session("garbage") is None


def test_expired_session_is_rejected():
    serializer = URLSafeTimedSerializer(SESSION_SECRET, salt=SESSION_SALT)
    token = serializer.dumps({"user_id": 1, "exp": int(time.time()) - 5})

    assert decode_session(token) is None


def test_middleware_exposes_user_id_from_cookie():
    app = FastAPI()
    app.add_middleware(SessionMiddleware)

    @app.get("/whoami")
    def whoami(request: Request):
        return {"user_id": request.state.user_id}

    client = TestClient(app)
    anonymous = client.get("/whoami").json()
    client.cookies.set(SESSION_COOKIE_NAME, create_session(9))
    signed_in = client.get("/whoami").json()

    assert anonymous == {"user_id": None}
    assert signed_in == {"user_id": 9}


def test_password_hashes_are_salted_and_verify():
    first = passwords.hash_password("hunter2")
    second = passwords.hash_password("hunter2")

    assert first != second
    assert passwords.looks_hashed(first)
    assert passwords.verify_password("hunter2", first)
    assert not passwords.verify_password("hunter3", first)
    assert not passwords.verify_password("hunter2", "hunter2")


def test_pbkdf2_fallback_verifies(monkeypatch):
    monkeypatch.setattr(passwords, "_bcrypt", None)

    stored = passwords.hash_password("long-secret")

    assert stored.startswith(passwords.PBKDF2_PREFIX)
    assert passwords.verify_password("long-secret", stored)
    assert passwords.upgraded_hash("long-secret", stored) is None


def test_malformed_pbkdf2_hash_is_rejected():
    assert not passwords.verify_password("x", "pbkdf2$notanumber$zz$yy")
