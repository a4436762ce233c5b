"""
API key authentication for the clinic dashboard.

Clinic staff sign in on the dashboard, which calls this service with the
shared key configured as CLINIC_SVC_API_KEY in the X-API-Key header.
"""
import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from core.config import API_KEY

logger = logging.getLogger(__name__)

API_KEY_HEADER_NAME = "X-API-Key"

api_key_header = APIKeyHeader(
    name=API_KEY_HEADER_NAME,
    auto_error=False,
    description="Shared dashboard key, sent in the X-API-Key header.",
)


def _reject(request: Request, status_code: int, detail: str) -> HTTPException:
    logger.warning(
        "Rejected dashboard request",
        extra={"path": request.url.path, "method": request.method, "status_code": status_code}
    )
    headers = {"WWW-Authenticate": "ApiKey"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return HTTPException(status_code=status_code, detail=detail, headers=headers)


async def verify_api_key(
    request: Request,
    api_key: Optional[str] = Security(api_key_header),
) -> str:
    """
    Router dependency guarding every clinic data endpoint.

    Raises:
        HTTPException: 401 when the header is missing, 403 when the key
            does not match (compared in constant time).
    """
    if not api_key:
        raise _reject(request, status.HTTP_401_UNAUTHORIZED,
                      f"Missing API key. Include it in the {API_KEY_HEADER_NAME} header.")
    if not secrets.compare_digest(api_key.encode(), API_KEY.encode()):
        raise _reject(request, status.HTTP_403_FORBIDDEN, "Invalid API key")
    return api_key
