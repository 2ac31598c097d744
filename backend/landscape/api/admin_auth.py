import logging
import secrets
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param

from landscape.infra.logging import update_log_context
from landscape.settings import settings

logger = logging.getLogger(__name__)


class AdminAuthException(HTTPException):
    def __init__(
        self, *, reason: str, detail: str = "Invalid authentication"
    ) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Basic"},
        )
        self.reason = reason


@dataclass
class AdminIdentity:
    username: str
    auth_method: str = "basic"


security = HTTPBasic(auto_error=False)


def _log_admin_auth_failure(
    request: Request,
    *,
    reason: str,
    credentials: HTTPBasicCredentials | None,
) -> None:
    authorization_header = request.headers.get("Authorization")
    scheme, _ = get_authorization_scheme_param(authorization_header)
    payload = {
        "reason": reason,
        "path": request.url.path,
        "method": request.method,
        "has_authorization_header": authorization_header is not None,
        "auth_scheme": scheme.lower() if scheme else None,
    }
    if credentials and credentials.username:
        payload["presented_username"] = credentials.username
    logger.warning("admin_auth_failed", extra={"extra": payload})


def _authenticate_credentials(credentials: HTTPBasicCredentials | None) -> AdminIdentity:
    username = settings.admin_basic_username
    password = settings.admin_basic_password
    if not username or not password:
        logger.warning("admin_auth_unconfigured", extra={"extra": {"path": "/v1/admin"}})
        raise AdminAuthException(reason="unconfigured_credentials")
    if not credentials:
        raise AdminAuthException(reason="missing_credentials")
    if secrets.compare_digest(credentials.username, username) and secrets.compare_digest(
        credentials.password, password
    ):
        return AdminIdentity(username=username)
    raise AdminAuthException(reason="invalid_credentials")


async def require_admin(
    request: Request, credentials: HTTPBasicCredentials | None = Depends(security)
) -> AdminIdentity:
    cached: AdminIdentity | None = getattr(request.state, "admin_identity", None)
    if cached:
        return cached
    try:
        identity = _authenticate_credentials(credentials)
    except AdminAuthException as exc:
        _log_admin_auth_failure(request, reason=exc.reason, credentials=credentials)
        raise
    request.state.admin_identity = identity
    update_log_context(role="admin", user_id=identity.username, auth_method=identity.auth_method)
    return identity
