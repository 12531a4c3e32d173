"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from loan_engine.domain.loans import LoanPolicy, LoanService
from loan_engine.infrastructure.database.repositories import LoanRepository
from loan_engine.infrastructure.database.session import get_db


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: str = Header(..., min_length=1, description="Acting user identifier")) -> str:
    """Acting user, passed explicitly by the caller"""
    return x_user_id


def get_loan_service(request: Request, db: Session = Depends(get_db)) -> LoanService:
    """Provide loan service bound to the request's database session and the app's loan policy"""
    return LoanService(LoanRepository(db), policy=LoanPolicy.from_settings(request.app.state.settings))
