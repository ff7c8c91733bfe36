"""
Employee authentication against the fixed operator table.

The two operator accounts are not backed by any collection. Their hashes are
computed once per process, the first time an employee logs in.
"""

from functools import lru_cache
from typing import Dict, Tuple

from starlette.concurrency import run_in_threadpool

from swiftgate.customers import validate_login
from swiftgate.errors import BadCredentials, NotFound
from swiftgate.logging_config import get_logger
from swiftgate.security import hash_password, verify_password

logger = get_logger("employees")

# accountNumber -> (fullName, password)
OPERATORS: Dict[str, Tuple[str, str]] = {
    "12345": ("John Doe", "Employee1Pass#"),
    "67890": ("Jane Smith", "Employee2Pass#"),
}


@lru_cache(maxsize=None)
def employee_table(rounds: int = 10) -> Dict[str, Dict[str, str]]:
    """Hashed operator table, built on first use and then reused."""
    return {
        account: {
            "accountNumber": account,
            "fullName": full_name,
            "passwordHash": hash_password(password, rounds),
        }
        for account, (full_name, password) in OPERATORS.items()
    }


async def authenticate(account_number: str, password: str, rounds: int = 10) -> Dict[str, str]:
    """Return the operator identity for a correct account/password pair."""
    validate_login(account_number, password)

    table = await run_in_threadpool(employee_table, rounds)
    employee = table.get(account_number)
    if employee is None:
        raise NotFound("Employee not found")

    if not await run_in_threadpool(verify_password, password, employee["passwordHash"]):
        logger.warning("Employee login rejected", extra={"account": account_number})
        raise BadCredentials("Invalid password")

    return {"accountNumber": employee["accountNumber"], "fullName": employee["fullName"]}
