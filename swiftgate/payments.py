"""
Payment intake for authenticated customers.
"""

import re
from datetime import datetime, timezone
from typing import Any, Dict

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from swiftgate.customers import get_customer
from swiftgate.database import PAYMENTS
from swiftgate.errors import NotFound, PersistenceError, ValidationError
from swiftgate.logging_config import get_logger
from swiftgate.security import matches

logger = get_logger("payments")

AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$", re.ASCII)
CURRENCY_PATTERN = re.compile(r"^[A-Za-z]{3}$", re.ASCII)
ALPHANUMERIC_PATTERN = re.compile(r"^[A-Za-z0-9]+$", re.ASCII)

# Checked in order; the first mismatch is reported.
PAYMENT_RULES = (
    ("amount", AMOUNT_PATTERN, "Invalid amount format"),
    ("currency", CURRENCY_PATTERN, "Invalid currency format"),
    ("provider", ALPHANUMERIC_PATTERN, "Invalid provider format"),
    ("swiftCode", ALPHANUMERIC_PATTERN, "Invalid SWIFT code format"),
)


def validate_payment(fields: Dict[str, Any]):
    for name, pattern, message in PAYMENT_RULES:
        if not matches(pattern, fields.get(name)):
            raise ValidationError(message)


async def submit_payment(db: AsyncIOMotorDatabase, claims: Dict[str, Any], amount: str,
                         currency: str, provider: str, recipient_account: str,
                         swift_code: str) -> Dict[str, Any]:
    """Record a pending payment for the customer named in ``claims``.

    Args:
        db: the application database
        claims: validated token claims; ``id`` must name an existing customer

    Returns:
        The stored payment document.
    """
    fields = {
        "amount": amount,
        "currency": currency,
        "provider": provider,
        "recipientAccount": recipient_account,
        "swiftCode": swift_code,
    }
    validate_payment(fields)

    try:
        customer = await get_customer(db, claims.get("id"))
        if not customer:
            raise NotFound("Customer not found")

        payment = dict(fields)
        payment["customerId"] = customer["_id"]
        payment["customerAccount"] = customer["accountNumber"]
        payment["createdAt"] = datetime.now(timezone.utc)

        result = await db[PAYMENTS].insert_one(payment)
    except PyMongoError:
        logger.exception("Payment insert failed", extra={"account": claims.get("accountNumber")})
        raise PersistenceError("Payment failed")

    payment["_id"] = result.inserted_id
    logger.info("Payment recorded", extra={"account": customer["accountNumber"]})
    return payment
