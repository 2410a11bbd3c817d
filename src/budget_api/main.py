from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError

from budget_api.aggregators.registry import build_aggregator_clients
from budget_api.api.middleware.error_handler import (
    handle_budget_api_error,
    handle_generic_error,
    handle_integrity_error,
    handle_validation_error,
)
from budget_api.api.middleware.logging import RequestLoggingMiddleware
from budget_api.api.v1 import router as v1_router
from budget_api.api.v1.health import router as health_router
from budget_api.config import settings
from budget_api.core.exceptions import BudgetAPIError
from budget_api.core.logging import setup_logging
from budget_api.services.mailer import SmtpEmailSender


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.log_level)
    app.state.aggregators = build_aggregator_clients(settings)
    app.state.email_sender = SmtpEmailSender(settings)
    yield
    # Shutdown
    for client in app.state.aggregators.values():
        await client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Budget Tracker API",
        description="Shared household budgets with bank sync",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register exception handlers (order matters - most specific first)
    app.add_exception_handler(BudgetAPIError, handle_budget_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(Exception, handle_generic_error)

    # Register routers
    app.include_router(health_router)
    app.include_router(v1_router)

    return app


app = create_app()
