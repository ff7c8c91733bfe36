"""
Customer registry: registration, login and lookup.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from swiftgate.database import CUSTOMERS, parse_object_id
from swiftgate.errors import BadCredentials, NotFound, PersistenceError, ValidationError
from swiftgate.logging_config import get_logger
from swiftgate.security import (
    ACCOUNT_NUMBER_PATTERN,
    hash_password,
    is_valid_password,
    matches,
    verify_password,
)

logger = get_logger("customers")

FULL_NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$", re.ASCII)
ID_NUMBER_PATTERN = re.compile(r"^\d{13}$", re.ASCII)

INVALID_INPUT = "Invalid input format"


def validate_registration(full_name: str, id_number: str, account_number: str, password: str):
    """Raise ValidationError unless every registration field is well formed."""
    if not (matches(FULL_NAME_PATTERN, full_name)
            and matches(ID_NUMBER_PATTERN, id_number)
            and matches(ACCOUNT_NUMBER_PATTERN, account_number)
            and is_valid_password(password)):
        raise ValidationError(INVALID_INPUT)


def validate_login(account_number: str, password: str):
    """Same whitelist checks for customer and employee logins."""
    if not matches(ACCOUNT_NUMBER_PATTERN, account_number) or not is_valid_password(password):
        raise ValidationError(INVALID_INPUT)


async def register(db: AsyncIOMotorDatabase, full_name: str, id_number: str,
                   account_number: str, password: str, rounds: int = 10) -> Dict[str, Any]:
    """Validate, hash and store a new customer.

    Returns:
        The stored customer document, including its ``_id``.
    """
    validate_registration(full_name, id_number, account_number, password)

    password_hash = await run_in_threadpool(hash_password, password, rounds)
    customer = {
        "fullName": full_name,
        "idNumber": id_number,
        "accountNumber": account_number,
        "passwordHash": password_hash,
        "createdAt": datetime.now(timezone.utc),
    }

    try:
        result = await db[CUSTOMERS].insert_one(customer)
    except PyMongoError:
        logger.exception("Customer insert failed", extra={"account": account_number})
        raise PersistenceError("Registration failed")

    customer["_id"] = result.inserted_id
    logger.info("Customer registered", extra={"account": account_number})
    return customer


async def authenticate(db: AsyncIOMotorDatabase, account_number: str, password: str) -> Dict[str, Any]:
    """Return the customer owning ``account_number`` if ``password`` matches."""
    validate_login(account_number, password)

    try:
        customer = await db[CUSTOMERS].find_one({"accountNumber": account_number})
    except PyMongoError:
        logger.exception("Customer lookup failed", extra={"account": account_number})
        raise PersistenceError("Login failed")

    if not customer:
        raise NotFound("Customer not found")

    if not await run_in_threadpool(verify_password, password, customer["passwordHash"]):
        logger.warning("Customer login rejected", extra={"account": account_number})
        raise BadCredentials("Invalid password")

    return customer


async def get_customer(db: AsyncIOMotorDatabase, customer_id: Any) -> Optional[Dict[str, Any]]:
    """Look a customer up by id; unknown or malformed ids give None."""
    object_id = parse_object_id(customer_id)
    if object_id is None:
        return None
    return await db[CUSTOMERS].find_one({"_id": object_id})
