"""Dependency injection for FastAPI endpoints"""

import uuid

from fastapi import HTTPException, Request


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def parse_analysis_id(analysis_id: str) -> uuid.UUID:
    """Path parameter guard: 400 on anything that is not a UUID"""
    try:
        return uuid.UUID(analysis_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid analysis ID format")
