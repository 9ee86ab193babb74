import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import payments, subscriptions, messages, galleries, webhooks
from app.core.config import settings
from app.core.errors import AppError
from app.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="PoDM API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Operational errors raised by services: expected, no traceback"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Ensure CORS headers are included even on unhandled exceptions"""
    logger.exception(f"Unhandled exception: {str(exc)}")

    response = JSONResponse(
        status_code=500,
        content={"success": False, "message": "Something went wrong on the server."}
    )

    # Error responses bypass CORSMiddleware, so add the headers manually
    origin = request.headers.get("origin")
    if origin and origin in settings.get_allowed_origins():
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


# Stripe webhooks need the raw body; the router reads request.body() itself
app.include_router(payments.router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(subscriptions.router, prefix="/api/v1/subscriptions", tags=["subscriptions"])
app.include_router(messages.router, prefix="/api/v1/messages", tags=["messages"])
app.include_router(galleries.router, prefix="/api/v1/galleries", tags=["galleries"])
app.include_router(webhooks.router, prefix="/api/v1/webhooks", tags=["webhooks"])


@app.get("/")
async def root():
    return {"message": "PoDM API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
