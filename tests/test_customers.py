"""
Tests for the customer registry and employee authentication.
"""

import pytest

from swiftgate import customers, employees
from swiftgate.database import CUSTOMERS
from swiftgate.errors import BadCredentials, NotFound, PersistenceError, ValidationError
from swiftgate.security import verify_password

from tests.conftest import JANE, BrokenDatabase


async def register_jane(db, **overrides):
    fields = dict(JANE, **overrides)
    return await customers.register(db, fields["fullName"], fields["idNumber"],
                                    fields["accountNumber"], fields["password"], rounds=4)


class TestRegistration:

    @pytest.mark.asyncio
    async def test_register_stores_hash_not_password(self, db):
        customer = await register_jane(db)

        stored = await db[CUSTOMERS].find_one({"_id": customer["_id"]})
        assert stored["fullName"] == "Jane Doe"
        assert stored["passwordHash"] != JANE["password"]
        assert verify_password(JANE["password"], stored["passwordHash"])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("id_number", ["123456789012", "12345678901234", "12345678901a3", ""])
    async def test_id_number_must_be_thirteen_digits(self, db, id_number):
        with pytest.raises(ValidationError):
            await register_jane(db, idNumber=id_number)
        assert await db[CUSTOMERS].count_documents({}) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value", [
        ("fullName", "Jane D0e"),
        ("fullName", "Jane-Doe"),
        ("accountNumber", "99-88"),
        ("accountNumber", ""),
        ("password", "password"),
        ("fullName", "Jané Doe"),
        ("idNumber", "١٢٣٤٥٦٧٨٩٠١٢٣"),
        ("idNumber", "１２３４５６７８９０１２３"),
        ("accountNumber", "٩٩٨"),
    ])
    async def test_rejects_malformed_fields(self, db, field, value):
        with pytest.raises(ValidationError):
            await register_jane(db, **{field: value})

    @pytest.mark.asyncio
    async def test_non_ascii_symbol_satisfies_policy(self, db):
        customer = await register_jane(db, password="Password1é")
        assert verify_password("Password1é", customer["passwordHash"])

    @pytest.mark.asyncio
    async def test_duplicate_account_number_is_a_persistence_error(self, db):
        await register_jane(db)
        with pytest.raises(PersistenceError, match="Registration failed"):
            await register_jane(db, fullName="John Doe", idNumber="9999999999999")

    @pytest.mark.asyncio
    async def test_store_failure(self):
        with pytest.raises(PersistenceError, match="Registration failed"):
            await register_jane(BrokenDatabase())


class TestCustomerLogin:

    @pytest.mark.asyncio
    async def test_correct_credentials(self, db):
        registered = await register_jane(db)
        customer = await customers.authenticate(db, JANE["accountNumber"], JANE["password"])
        assert customer["_id"] == registered["_id"]

    @pytest.mark.asyncio
    async def test_wrong_password_is_bad_credentials(self, db):
        await register_jane(db)
        with pytest.raises(BadCredentials):
            await customers.authenticate(db, JANE["accountNumber"], "WrongPass1!")

    @pytest.mark.asyncio
    async def test_unknown_account_is_not_found(self, db):
        await register_jane(db)
        with pytest.raises(NotFound):
            await customers.authenticate(db, "111111", JANE["password"])

    @pytest.mark.asyncio
    async def test_password_policy_applies_at_login(self, db):
        await register_jane(db)
        with pytest.raises(ValidationError):
            await customers.authenticate(db, JANE["accountNumber"], "short")

    @pytest.mark.asyncio
    async def test_non_ascii_account_number_at_login(self, db):
        await register_jane(db)
        with pytest.raises(ValidationError):
            await customers.authenticate(db, "٩٩٨٨٧٧", JANE["password"])

    @pytest.mark.asyncio
    async def test_store_failure(self):
        with pytest.raises(PersistenceError, match="Login failed"):
            await customers.authenticate(BrokenDatabase(), JANE["accountNumber"], JANE["password"])

    @pytest.mark.asyncio
    async def test_get_customer_with_malformed_id(self, db):
        assert await customers.get_customer(db, "not-an-object-id") is None


class TestEmployeeLogin:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("account,password", [("12345", "Employee1Pass#"), ("67890", "Employee2Pass#")])
    async def test_operators_can_log_in(self, account, password):
        employee = await employees.authenticate(account, password, rounds=4)
        assert employee["accountNumber"] == account
        assert "passwordHash" not in employee

    @pytest.mark.asyncio
    async def test_wrong_password(self):
        with pytest.raises(BadCredentials):
            await employees.authenticate("12345", "Employee2Pass#", rounds=4)

    @pytest.mark.asyncio
    async def test_unknown_operator(self):
        with pytest.raises(NotFound):
            await employees.authenticate("55555", "Employee1Pass#", rounds=4)

    @pytest.mark.asyncio
    async def test_invalid_format(self):
        with pytest.raises(ValidationError):
            await employees.authenticate("12a45", "Employee1Pass#", rounds=4)

    def test_table_is_hashed_once(self):
        assert employees.employee_table(4) is employees.employee_table(4)
        assert all(entry["passwordHash"].startswith("$2") for entry in employees.employee_table(4).values())
