# api/auth.py
import base64
import binascii
import secrets
from typing import Optional, Tuple

from fastapi import HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param

from ..utils.logger import get_logger

log = get_logger("Auth")

USERNAME = "admin"
REALM = "bcc-exporter"


def basic_credentials(authorization: Optional[str]) -> Optional[Tuple[bytes, bytes]]:
    """Raw (user, password) bytes from a Basic Authorization header, or None.

    Credentials are left undecoded so that any UTF-8 password can match.
    """
    scheme, param = get_authorization_scheme_param(authorization)
    if scheme.lower() != "basic" or not param:
        return None
    try:
        decoded = base64.b64decode(param, validate=True)
    except (binascii.Error, ValueError):
        return None
    user, sep, password = decoded.partition(b":")
    if not sep:
        return None
    return user, password


def require_auth(request: Request) -> None:
    """Basic auth as admin/<password>; open when no password is configured."""
    password = request.app.state.settings.password
    if not password:
        return

    credentials = basic_credentials(request.headers.get("Authorization"))
    ok = (
        credentials is not None
        and secrets.compare_digest(credentials[0], USERNAME.encode())
        and secrets.compare_digest(credentials[1], password.encode("utf-8"))
    )
    if not ok:
        log.warning(f"Rejected credentials from {request.client.host if request.client else 'unknown'}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
        )
