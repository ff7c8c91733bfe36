"""
Pydantic models for the SwiftGate API.
Defines request bodies and response shapes for customers, payments and the
verification pipeline. Format rules (regexes) are enforced by the services.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, field_validator


class RegisterRequest(BaseModel):
    """New customer registration."""
    fullName: str
    idNumber: str
    accountNumber: str
    password: str


class LoginRequest(BaseModel):
    """Customer or employee login."""
    accountNumber: str
    password: str


class PaymentRequest(BaseModel):
    """Payment submitted by an authenticated customer."""
    amount: str
    currency: str
    provider: str
    recipientAccount: str
    swiftCode: str

    @field_validator("amount", mode="before")
    @classmethod
    def amount_as_text(cls, value: Any) -> Any:
        # JSON numbers are checked in their decimal string form
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class VerifyRequest(BaseModel):
    paymentId: str


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    message: str
    token: str


class PaymentRecord(BaseModel):
    """A pending payment as stored in the payments collection."""
    id: str
    amount: str
    currency: str
    provider: str
    recipientAccount: str
    swiftCode: str
    customerId: str
    customerAccount: Optional[str] = None
    createdAt: Optional[str] = None


class PaymentResponse(BaseModel):
    message: str
    paymentDetails: PaymentRecord


class VerifyResponse(BaseModel):
    message: str
    transactionId: str


class SubmitResponse(BaseModel):
    message: str
    submitted: int


PaymentList = List[PaymentRecord]
