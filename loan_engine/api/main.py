"""FastAPI application factory"""

from typing import Optional
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.responses import Response

from loan_engine.api.middleware import RequestIDMiddleware, MetricsMiddleware
from loan_engine.api.v1 import loans, repayments
from loan_engine.api.v1.errors import domain_exception_handler
from loan_engine.config import Settings, settings as default_settings
from loan_engine.domain.exceptions import DomainException
from loan_engine.infrastructure.database.session import get_db
from loan_engine.infrastructure.observability.logging import setup_logging


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build the loan engine API; `app_settings` overrides the environment-loaded settings"""
    app_settings = app_settings or default_settings
    setup_logging(app_settings.log_level)

    app = FastAPI(
        title="Loan Engine",
        description="Loan origination and repayment allocation service",
        version="0.1.0",
    )

    # Last added = first executed, so every request gets an ID before it is timed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.state.settings = app_settings
    app.add_exception_handler(DomainException, domain_exception_handler)

    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": app_settings.service_name,
            "allowed_terms": sorted(app_settings.allowed_terms),
            "allowed_currencies": sorted(app_settings.allowed_currencies),
        }

    @app.get("/ready")
    def readiness_check(db: Session = Depends(get_db)):
        """Readiness: the database answers a trivial query"""
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return JSONResponse(status_code=503, content={"status": "unavailable", "database": "down"})
        return {"status": "ready", "database": "up"}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(repayments.router, prefix="/v1", tags=["repayments"])

    return app


app = create_app()
