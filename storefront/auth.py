"""Bearer-token verification for customer and admin routes."""
import functools
import logging
from datetime import datetime, timedelta, timezone
from flask import current_app, g, request
from jose import JWTError, jwt

from storefront.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "auth-token"


def issue_token(user_id, email, role="cliente", expires_delta=None):
    """Sign a token carrying the claims the API checks.

    Login is handled elsewhere; this is used by the CLI and tests.
    """
    expires_delta = expires_delta or timedelta(
        days=current_app.config["JWT_EXPIRES_DAYS"]
    )
    claims = {
        "id": user_id,
        "email": email,
        "rol": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(
        claims,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config["JWT_ALGORITHM"],
    )


def _token_from_request():
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):].strip()
    return request.cookies.get(TOKEN_COOKIE)


def current_user():
    """Return the verified token claims, or raise UnauthorizedError."""
    token = _token_from_request()
    if not token:
        raise UnauthorizedError("Token de autenticación requerido")
    try:
        claims = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
        )
    except JWTError as e:
        logger.info("Rejected token: %s", e)
        raise UnauthorizedError("Token inválido")
    if claims.get("id") is None:
        raise UnauthorizedError("Token inválido")
    return claims


def login_required(view):
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        g.user = current_user()
        return view(*args, **kwargs)

    return wrapped


def admin_required(view):
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        user = current_user()
        if user.get("rol") != "admin":
            raise ForbiddenError("Permisos de administrador requeridos")
        g.user = user
        return view(*args, **kwargs)

    return wrapped

