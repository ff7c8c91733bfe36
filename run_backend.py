"""
Backend server runner script.

Starts the SwiftGate API with uvicorn. HTTPS is used when SSL_KEYFILE and
SSL_CERTFILE are both set.

Usage:
    python run_backend.py

Or with the uvicorn CLI:
    uvicorn swiftgate.app:create_app --factory --port 3000
"""

import uvicorn

from swiftgate.app import create_app
from swiftgate.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    tls = bool(settings.ssl_keyfile and settings.ssl_certfile)
    scheme = "https" if tls else "http"
    print(f"Starting SwiftGate on {scheme}://{settings.host}:{settings.port}")
    print("Press Ctrl+C to stop")
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        ssl_keyfile=settings.ssl_keyfile if tls else None,
        ssl_certfile=settings.ssl_certfile if tls else None,
    )
