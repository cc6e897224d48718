"""FastAPI application for the storefront checkout backend.

This package provides REST endpoints for:
- Checkout session creation and status
- Stripe webhook events
- Form submission notifications
- Health checks
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from storefront import __version__
from storefront.config import get_settings
from storefront.utils.logging import configure_logging, get_logger
from storefront_api.exceptions import register_exception_handlers
from storefront_api.middleware.correlation import CORRELATION_ID_HEADER, CorrelationIdMiddleware
from storefront_api.models.common import PingResponse
from storefront_api.routes import checkout_router, forms_router, sessions_router, webhooks_router

configure_logging(logging.INFO)
logger = get_logger(__name__)

app = FastAPI(
    title="Storefront Checkout API",
    description="Stripe checkout, webhook and notification endpoints for the package storefront",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_ID_HEADER],
)
app.add_middleware(CorrelationIdMiddleware)

# Register exception handlers for consistent error responses
register_exception_handlers(app)

# Include routers under /api prefix
app.include_router(checkout_router, prefix="/api")
app.include_router(sessions_router, prefix="/api")
app.include_router(webhooks_router, prefix="/api")
app.include_router(forms_router, prefix="/api")


@app.get("/api/ping", response_model=PingResponse, tags=["health"])
async def ping() -> PingResponse:
    """Health check endpoint at /api/ping."""
    return PingResponse(timestamp=datetime.now(UTC).isoformat())


# Lambda handler - Mangum wraps FastAPI for AWS Lambda + API Gateway
# (base64-encoded bodies are decoded before the routes see them)
handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the FastAPI server.

    Args:
        host: Host to bind to (default: 0.0.0.0)
        port: Port to listen on (default: 8080)
        reload: Enable hot reload for development (default: True)
    """
    import uvicorn

    if reload:
        # Use string reference for reload mode (uvicorn requirement)
        uvicorn.run(
            "storefront_api.main:app",
            host=host,
            port=port,
            reload=True,
            reload_dirs=["src"],
        )
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
