"""Dependency injection for FastAPI endpoints"""

from fastapi import HTTPException, Request
from dental_ledger.config import settings
from dental_ledger.infrastructure.clients.audit import AuditClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clinic_id(request: Request) -> str:
    """
    Acting clinic, as established by the authenticating proxy.

    Every repository is scoped with this value; tenant fields in request
    bodies are never trusted.
    """
    clinic_id = (request.headers.get(settings.clinic_header) or "").strip()
    if not clinic_id:
        raise HTTPException(status_code=401, detail=f"Missing {settings.clinic_header} header")
    return clinic_id


def get_audit_client() -> AuditClient:
    """Provide audit webhook client instance"""
    return AuditClient()
