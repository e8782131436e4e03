"""Dependency injection for FastAPI endpoints"""

from datetime import date
from fastapi import Request


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_as_of() -> date:
    """Evaluation date for duration and ROI figures"""
    return date.today()
