"""
Payment lifecycle pipeline.

A payment moves forward through three collections and is never copied back:

    payments (pending) -> transactions (verified) -> swifts (submitted)

Each move is a promotion in three single-document steps:

1. claim the source by setting ``promotedTo`` to the target's future id,
   only if nobody has claimed it yet;
2. insert the target under that id (a duplicate key means an earlier
   attempt already inserted it);
3. delete the source.

A crash between steps leaves a claimed source behind. Any later promotion of
the same source, or ``resume_promotions``, finishes it with the same target
id, so a record is never duplicated or lost.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from swiftgate.database import PAYMENTS, SWIFTS, TRANSACTIONS, parse_object_id
from swiftgate.errors import NotFound, PersistenceError
from swiftgate.logging_config import get_logger

logger = get_logger("pipeline")

VERIFIED = "verified"
SUBMITTED = "submitted"

CARRIED_FIELDS = ("customerId", "customerAccount", "amount", "currency",
                  "provider", "recipientAccount", "swiftCode")

Document = Dict[str, Any]


def transaction_from_payment(payment: Document) -> Document:
    transaction = {name: payment.get(name) for name in CARRIED_FIELDS}
    transaction["status"] = VERIFIED
    transaction["paymentId"] = payment["_id"]
    transaction["createdAt"] = datetime.now(timezone.utc)
    return transaction


def swift_from_transaction(transaction: Document) -> Document:
    record = {name: transaction.get(name) for name in CARRIED_FIELDS}
    record["status"] = SUBMITTED
    record["transactionId"] = transaction["_id"]
    record["createdAt"] = transaction.get("createdAt")
    record["submittedAt"] = datetime.now(timezone.utc)
    return record


async def promote(source: AsyncIOMotorCollection, target: AsyncIOMotorCollection,
                  document: Document, build: Callable[[Document], Document]) -> Optional[ObjectId]:
    """Move ``document`` from ``source`` to ``target``.

    Returns:
        The target id, or None if the source vanished because another
        caller already finished the move.
    """
    if document.get("promotedTo") is None:
        claimed = await source.find_one_and_update(
            {"_id": document["_id"], "promotedTo": None},
            {"$set": {"promotedTo": ObjectId()}},
            return_document=ReturnDocument.AFTER,
        )
        if claimed is None:
            # Lost the claim; adopt the winner's target id.
            claimed = await source.find_one({"_id": document["_id"]})
            if claimed is None:
                return None
        document = claimed

    target_id = document["promotedTo"]
    record = build(document)
    record["_id"] = target_id
    try:
        await target.insert_one(record)
    except DuplicateKeyError:
        logger.info("Promotion target %s already present", target_id)

    await source.delete_one({"_id": document["_id"]})
    return target_id


async def list_pending(db: AsyncIOMotorDatabase) -> List[Document]:
    """All pending payments not yet claimed by a promotion."""
    try:
        cursor = db[PAYMENTS].find({"promotedTo": None})
        return await cursor.to_list(length=None)
    except PyMongoError:
        logger.exception("Listing payments failed")
        raise PersistenceError("Failed to fetch payments")


async def verify_payment(db: AsyncIOMotorDatabase, payment_id: Any) -> ObjectId:
    """Promote one pending payment to a verified transaction.

    Returns:
        The id of the new transaction.
    """
    object_id = parse_object_id(payment_id)
    if object_id is None:
        raise NotFound("Payment not found")

    try:
        payment = await db[PAYMENTS].find_one({"_id": object_id})
        if not payment:
            raise NotFound("Payment not found")

        transaction_id = await promote(db[PAYMENTS], db[TRANSACTIONS], payment,
                                       transaction_from_payment)
    except PyMongoError:
        logger.exception("Verifying payment %s failed", object_id)
        raise PersistenceError("Failed to verify payment")

    if transaction_id is None:
        raise NotFound("Payment not found")

    logger.info("Payment verified", extra={"account": payment.get("customerAccount")})
    return transaction_id


async def submit_all_verified(db: AsyncIOMotorDatabase) -> int:
    """Promote every verified transaction to a submitted SWIFT record.

    Safe to re-run after a failure: transactions already moved are gone from
    the query, and half-moved ones are finished under their original id.
    """
    submitted = 0
    try:
        cursor = db[TRANSACTIONS].find({"status": VERIFIED})
        transactions = await cursor.to_list(length=None)

        for transaction in transactions:
            swift_id = await promote(db[TRANSACTIONS], db[SWIFTS], transaction,
                                     swift_from_transaction)
            if swift_id is not None:
                submitted += 1
    except PyMongoError:
        logger.exception("SWIFT submission failed after %d records", submitted)
        raise PersistenceError("Failed to submit transactions to SWIFT")

    logger.info("Submitted %d transactions to SWIFT", submitted)
    return submitted


async def resume_promotions(db: AsyncIOMotorDatabase) -> int:
    """Finish promotions interrupted part way. Returns how many were finished."""
    resumed = 0
    stages = (
        (db[PAYMENTS], db[TRANSACTIONS], transaction_from_payment),
        (db[TRANSACTIONS], db[SWIFTS], swift_from_transaction),
    )
    for source, target, build in stages:
        cursor = source.find({"promotedTo": {"$ne": None}})
        for document in await cursor.to_list(length=None):
            if await promote(source, target, document, build) is not None:
                resumed += 1

    if resumed:
        logger.warning("Resumed %d interrupted promotions", resumed)
    return resumed
