"""Shared fixtures: RSA keys, a manual clock and a fake requests session."""

import json
import threading
from datetime import datetime, timedelta, timezone

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from github_parts import AppCredentials, GitHubClient

API_URL = "https://api.github.test"
START = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualClock:
    def __init__(self, start: datetime = START):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


def make_response(status: int, payload=None, body: bytes = None, url: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = url
    if body is not None:
        response._content = body
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = b""
    return response


class FakeSession:
    """Stands in for requests.Session

    Responses are queued per (method, url). The last queued response is repeated
    once the queue is down to one entry.
    """

    def __init__(self):
        self.calls = []
        self._routes = {}
        self._lock = threading.Lock()

    def add(self, method: str, path: str, status: int = 200, payload=None, body: bytes = None, exc=None):
        self._routes.setdefault((method, API_URL + path), []).append((status, payload, body, exc))

    def add_token(self, installation_id: int = 1, token: str = "ghs_token", expires_at: datetime = None, status=201):
        expires_at = expires_at or START + timedelta(hours=1)
        self.add(
            "POST",
            f"/app/installations/{installation_id}/access_tokens",
            status=status,
            payload={
                "token": token,
                "expires_at": expires_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
                "permissions": {"checks": "write", "contents": "read"},
                "repository_selection": "selected",
            },
        )

    def calls_to(self, method: str, path: str):
        return [call for call in self.calls if call["method"] == method and call["url"] == API_URL + path]

    def request(self, method, url, headers=None, params=None, json=None, timeout=None, **kwargs):
        with self._lock:
            self.calls.append(
                {"method": method, "url": url, "headers": headers or {}, "params": params, "json": json, "timeout": timeout}
            )
            queue = self._routes.get((method, url))
            if not queue:
                raise AssertionError(f"unexpected request {method} {url}")
            status, payload, body, exc = queue.pop(0) if len(queue) > 1 else queue[0]
        if exc is not None:
            raise exc
        return make_response(status, payload, body, url)

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def close(self):
        pass


@pytest.fixture(scope="session")
def rsa_keys():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")
    return private_pem, public_pem


@pytest.fixture
def private_pem(rsa_keys) -> str:
    return rsa_keys[0]


@pytest.fixture
def public_pem(rsa_keys) -> str:
    return rsa_keys[1]


@pytest.fixture
def credentials(private_pem) -> AppCredentials:
    return AppCredentials(app_id=1, private_key=private_pem)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(credentials, session, clock) -> GitHubClient:
    return GitHubClient(credentials, api_url=API_URL, session=session, clock=clock, user_agent="github-parts-tests")
