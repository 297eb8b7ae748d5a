# salonhub/core/auth.py
import logging
from typing import Optional

from fastapi import Request
from firebase_admin import auth as firebase_auth

from salonhub.core.errors import CallableError, ErrorCode
from salonhub.schemas.principal import Principal

logger = logging.getLogger("salonhub.auth")


def _extract_bearer_token(request: Request) -> Optional[str]:
    """
    Reads the token from `Authorization: Bearer <id_token>`.
    Returns None when absent.
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_id_token(id_token: str) -> dict:
    """
    Firebase ID token verification (revocation checked).
    An invalid/revoked/expired token is an unauthenticated call.
    """
    try:
        return firebase_auth.verify_id_token(id_token, check_revoked=True)
    except firebase_auth.ExpiredIdTokenError:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "Token expired.")
    except firebase_auth.RevokedIdTokenError:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "Session revoked.")
    except firebase_auth.UserDisabledError:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "User account is disabled.")
    except (firebase_auth.InvalidIdTokenError, ValueError) as exc:
        logger.info("Rejected ID token: %s", exc)
        raise CallableError(ErrorCode.UNAUTHENTICATED, "Invalid authentication token.")


def _token_to_principal(decoded: dict) -> Principal:
    uid = decoded.get("uid") or decoded.get("user_id")
    if not uid:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "Token missing uid.")
    return Principal(
        uid=uid,
        email=decoded.get("email"),
        display_name=decoded.get("name"),
        picture=decoded.get("picture"),
    )


# --------- FastAPI Dependencies --------- #

async def get_optional_principal(request: Request) -> Optional[Principal]:
    """
    Token optional: verified Principal if a bearer token is present, else None.
    Callables take this and let the operation decide how to treat anonymous calls.
    """
    token = _extract_bearer_token(request)
    if not token:
        return None
    decoded = _decode_id_token(token)
    return _token_to_principal(decoded)


def require_principal(principal: Optional[Principal]) -> Principal:
    if principal is None:
        raise CallableError(ErrorCode.UNAUTHENTICATED, "The function must be called while authenticated.")
    return principal
