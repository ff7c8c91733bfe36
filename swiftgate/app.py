"""
FastAPI application for the SwiftGate payments backend.
Provides REST endpoints for customer registration and login, employee login,
payment intake and the verify/submit pipeline.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from swiftgate import customers, employees, payments, pipeline
from swiftgate.config import Settings, get_settings
from swiftgate.database import create_client, ensure_indexes, get_db, serialize
from swiftgate.errors import Forbidden, SwiftGateError
from swiftgate.logging_config import get_logger, setup_logging
from swiftgate.models import (
    LoginRequest,
    MessageResponse,
    PaymentRecord,
    PaymentRequest,
    PaymentResponse,
    RegisterRequest,
    SubmitResponse,
    TokenResponse,
    VerifyRequest,
    VerifyResponse,
)
from swiftgate.security import ROLE_CUSTOMER, ROLE_EMPLOYEE, issue_token, validate_token

logger = get_logger("api")

bearer = HTTPBearer(auto_error=False)

# Generic 500 message per route, matching what the services report for store failures.
ROUTE_FAILURES = {
    "/register": "Registration failed",
    "/login": "Login failed",
    "/employeelogin": "Employee login failed",
    "/payment": "Payment failed",
    "/payments": "Failed to fetch payments",
    "/paymentverify": "Failed to verify payment",
    "/submitAllToSWIFT": "Failed to submit transactions to SWIFT",
}


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_role(role: str):
    """Dependency factory: a valid bearer token carrying ``role``."""
    def check(request: Request,
              credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Dict[str, Any]:
        token = credentials.credentials if credentials else None
        claims = validate_token(request.app.state.settings, token)
        if claims.get("role") != role:
            raise Forbidden("Access denied")
        return claims
    return check


require_customer = require_role(ROLE_CUSTOMER)
require_employee = require_role(ROLE_EMPLOYEE)


def create_app(settings: Optional[Settings] = None,
               client: Optional[AsyncIOMotorClient] = None) -> FastAPI:
    """Build the API.

    Args:
        settings: defaults to the environment
        client: an already open Motor client; when given, the app uses it and
            leaves closing it to the caller

    Returns:
        FastAPI: the configured application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo = client or create_client(settings)
        app.state.db = mongo[settings.db_name]
        if settings.generated_secret:
            logger.warning("JWT_SECRET not set; using a per-process secret")
        await ensure_indexes(app.state.db)
        await pipeline.resume_promotions(app.state.db)
        logger.info("SwiftGate started on database %s", settings.db_name)
        try:
            yield
        finally:
            if client is None:
                mongo.close()
            logger.info("SwiftGate stopped")

    app = FastAPI(title="SwiftGate Payments Backend", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app)
    return app


def register_error_handlers(app: FastAPI):

    @app.exception_handler(SwiftGateError)
    async def handle_swiftgate_error(request: Request, exc: SwiftGateError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_bad_body(request: Request, exc: RequestValidationError):
        # Missing fields and wrong JSON types are input format errors too.
        return JSONResponse(status_code=400, content={"error": customers.INVALID_INPUT})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"route": request.url.path})
        message = ROUTE_FAILURES.get(request.url.path, "Internal server error")
        return JSONResponse(status_code=500, content={"error": message})


def register_routes(app: FastAPI):

    # ================
    #   HEALTH
    # ================
    @app.get("/health", description="Liveness probe.")
    async def health():
        return {"status": "ok"}

    # ================
    #   CUSTOMER REGISTRATION
    # ================
    @app.post(
        "/register",
        status_code=201,
        response_model=MessageResponse,
        description="Registers a new customer. The password is stored only as a bcrypt hash."
    )
    async def register(body: RegisterRequest,
                       db: AsyncIOMotorDatabase = Depends(get_db),
                       settings: Settings = Depends(get_app_settings)):
        await customers.register(db, body.fullName, body.idNumber, body.accountNumber,
                                 body.password, rounds=settings.bcrypt_rounds)
        return {"message": "Registration successful"}

    # ================
    #   CUSTOMER LOGIN
    # ================
    @app.post(
        "/login",
        response_model=TokenResponse,
        description="Checks a customer's account number and password and returns a one hour bearer token."
    )
    async def login(body: LoginRequest,
                    db: AsyncIOMotorDatabase = Depends(get_db),
                    settings: Settings = Depends(get_app_settings)):
        customer = await customers.authenticate(db, body.accountNumber, body.password)
        token = issue_token(settings, {
            "id": str(customer["_id"]),
            "accountNumber": customer["accountNumber"],
            "role": ROLE_CUSTOMER,
        })
        logger.info("Customer logged in", extra={"account": customer["accountNumber"]})
        return {"message": "Login successful", "token": token}

    # ================
    #   EMPLOYEE LOGIN
    # ================
    @app.post(
        "/employeelogin",
        response_model=TokenResponse,
        description="Checks an operator's credentials against the fixed employee table."
    )
    async def employee_login(body: LoginRequest,
                             settings: Settings = Depends(get_app_settings)):
        employee = await employees.authenticate(body.accountNumber, body.password,
                                                rounds=settings.bcrypt_rounds)
        token = issue_token(settings, {
            "id": employee["accountNumber"],
            "accountNumber": employee["accountNumber"],
            "role": ROLE_EMPLOYEE,
        })
        logger.info("Employee logged in", extra={"account": employee["accountNumber"]})
        return {"message": "Login successful", "token": token}

    # ================
    #   PAYMENT INTAKE
    # ================
    @app.post(
        "/payment",
        response_model=PaymentResponse,
        description="Records a pending payment for the logged-in customer."
    )
    async def make_payment(body: PaymentRequest,
                           claims: Dict[str, Any] = Depends(require_customer),
                           db: AsyncIOMotorDatabase = Depends(get_db)):
        payment = await payments.submit_payment(
            db, claims, body.amount, body.currency, body.provider,
            body.recipientAccount, body.swiftCode,
        )
        return {"message": "Payment successfully processed", "paymentDetails": serialize(payment)}

    # ================
    #   PENDING PAYMENTS (EMPLOYEES)
    # ================
    @app.get(
        "/payments",
        response_model=List[PaymentRecord],
        description="Returns every payment awaiting employee verification."
    )
    async def list_payments(claims: Dict[str, Any] = Depends(require_employee),
                            db: AsyncIOMotorDatabase = Depends(get_db)):
        pending = await pipeline.list_pending(db)
        return [serialize(payment) for payment in pending]

    # ================
    #   VERIFY PAYMENT
    # ================
    @app.post(
        "/paymentverify",
        response_model=VerifyResponse,
        description="Moves a pending payment into the verified transactions collection."
    )
    async def verify_payment(body: VerifyRequest,
                             claims: Dict[str, Any] = Depends(require_employee),
                             db: AsyncIOMotorDatabase = Depends(get_db)):
        transaction_id = await pipeline.verify_payment(db, body.paymentId)
        logger.info("Payment verified by employee", extra={"account": claims["accountNumber"]})
        return {
            "message": "Payment verified and moved to transactions",
            "transactionId": str(transaction_id),
        }

    # ================
    #   SUBMIT TO SWIFT
    # ================
    @app.post(
        "/submitAllToSWIFT",
        response_model=SubmitResponse,
        description="Moves every verified transaction into the SWIFT collection."
    )
    async def submit_all_to_swift(claims: Dict[str, Any] = Depends(require_employee),
                                  db: AsyncIOMotorDatabase = Depends(get_db)):
        submitted = await pipeline.submit_all_verified(db)
        return {"message": "All verified transactions submitted to SWIFT", "submitted": submitted}
