"""
Shared fixtures: fast bcrypt settings and an in-memory Motor stand-in.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import PyMongoError

from swiftgate.app import create_app
from swiftgate.config import Settings
from swiftgate.database import ensure_indexes

JANE = {
    "fullName": "Jane Doe",
    "idNumber": "1234567890123",
    "accountNumber": "998877",
    "password": "Passw0rd!",
}

PAYMENT = {
    "amount": "250.75",
    "currency": "ZAR",
    "provider": "SWIFT",
    "recipientAccount": "556677",
    "swiftCode": "ABSAZAJJ",
}


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", bcrypt_rounds=4, db_name="swiftgate_test")


@pytest_asyncio.fixture
async def db(settings):
    """Empty database with the production indexes."""
    database = AsyncMongoMockClient()[settings.db_name]
    await ensure_indexes(database)
    return database


@pytest.fixture
def client(settings):
    """API client running the full lifespan against an in-memory store."""
    app = create_app(settings, client=AsyncMongoMockClient())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def customer_token(client):
    assert client.post("/register", json=JANE).status_code == 201
    r = client.post("/login", json={"accountNumber": JANE["accountNumber"], "password": JANE["password"]})
    return r.json()["token"]


@pytest.fixture
def employee_token(client):
    r = client.post("/employeelogin", json={"accountNumber": "12345", "password": "Employee1Pass#"})
    return r.json()["token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


class BrokenCollection:
    """Collection whose every call fails like an unreachable server."""

    def __init__(self, name):
        self.name = name

    def _fail(self, *args, **kwargs):
        raise PyMongoError(f"{self.name} unavailable")

    async def insert_one(self, *args, **kwargs):
        self._fail()

    async def find_one(self, *args, **kwargs):
        self._fail()

    def find(self, *args, **kwargs):
        self._fail()


class BrokenDatabase:
    def __getitem__(self, name):
        return BrokenCollection(name)
