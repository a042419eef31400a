"""Bearer-token identity and role rules for the HTTP API.

Tokens are issued by the platform's identity service; this module only
verifies them (HS256, shared secret) and exposes the ``{id, email, role}``
claims as an :class:`~insights.schemas.Identity`.
"""
from __future__ import annotations

import logging
import os

import jwt
from fastapi import Depends, Header, HTTPException
from pydantic import ValidationError

from insights.schemas import Identity

log = logging.getLogger(__name__)

ADMIN_ROLE = "super_admin"


def decode_token(token: str) -> Identity:
    """Verify a token and return its identity. Raises ``jwt.InvalidTokenError`` when unusable."""
    secret = os.environ.get("INSIGHTS_JWT_SECRET", "")
    if not secret:
        raise jwt.InvalidTokenError("INSIGHTS_JWT_SECRET is not configured")
    algorithm = os.environ.get("INSIGHTS_JWT_ALGORITHM", "HS256")
    claims = jwt.decode(token, secret, algorithms=[algorithm])
    try:
        return Identity.model_validate(claims)
    except ValidationError as exc:
        raise jwt.InvalidTokenError(f"Token is missing identity claims: {exc}") from exc


def _bearer_token(authorization: str | None) -> str | None:
    parts = (authorization or "").split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def current_identity(authorization: str | None = Header(None)) -> Identity:
    token = _bearer_token(authorization)
    if not token:
        raise HTTPException(401, "Access token required")
    try:
        return decode_token(token)
    except jwt.InvalidTokenError as exc:
        log.info("Rejected bearer token: %s", exc)
        raise HTTPException(403, "Invalid or expired token") from exc


def is_admin(identity: Identity) -> bool:
    return identity.role == ADMIN_ROLE


def require_roles(*roles: str):
    """Dependency factory: the caller's role must be one of ``roles``."""
    def dependency(identity: Identity = Depends(current_identity)) -> Identity:
        if identity.role not in roles:
            raise HTTPException(403, f"Access denied. Required roles: {', '.join(roles)}")
        return identity
    return dependency


require_admin = require_roles(ADMIN_ROLE)
