"""
One-shot bootstrap that writes the fixed operator accounts to the
``employees`` collection.

Run with: python seed_employees.py
"""

from datetime import datetime, timezone
from typing import List, Optional

from pymongo.database import Database

from swiftgate.config import Settings, get_settings
from swiftgate.database import EMPLOYEES, get_mongo_client
from swiftgate.employees import OPERATORS
from swiftgate.logging_config import get_logger, setup_logging
from swiftgate.security import hash_password

logger = get_logger("seed")


def seed_employees(db: Database, rounds: int = 10) -> List[str]:
    """Upsert every operator with a freshly hashed password.

    Re-running replaces the stored hash instead of adding duplicates.

    Returns:
        The account numbers written.
    """
    written = []
    for account_number, (full_name, password) in OPERATORS.items():
        employee = {
            "fullName": full_name,
            "accountNumber": account_number,
            "passwordHash": hash_password(password, rounds),
            "createdAt": datetime.now(timezone.utc),
        }
        db[EMPLOYEES].replace_one({"accountNumber": account_number}, employee, upsert=True)
        logger.info(f"Employee {full_name} created successfully", extra={"account": account_number})
        written.append(account_number)
    return written


def main(settings: Optional[Settings] = None) -> int:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    client = get_mongo_client(settings)
    if client is None:
        return 1

    try:
        seed_employees(client[settings.db_name], settings.bcrypt_rounds)
    finally:
        client.close()
    return 0
