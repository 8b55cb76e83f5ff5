"""Application errors and their translation to the JSON error envelope."""
import logging
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Error interno del servidor"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Datos inválidos"


class ConflictError(AppError):
    # Duplicate color/size combinations are reported as a plain 400
    status_code = 400
    default_message = "El registro ya existe"


class UnauthorizedError(AppError):
    status_code = 401
    default_message = "No autorizado"


class ForbiddenError(AppError):
    status_code = 403
    default_message = "Acceso denegado"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Recurso no encontrado"


class DatabaseError(AppError):
    status_code = 500
    default_message = "Error de base de datos"


def error_response(message, status_code):
    return {"success": False, "error": message}, status_code


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        if error.status_code >= 500:
            logger.error("%s: %s", type(error).__name__, error.message)
            return error_response(AppError.default_message, error.status_code)
        return error_response(error.message, error.status_code)

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        from storefront.extensions import db

        logger.exception("Database error")
        db.session.rollback()
        return error_response(DatabaseError.default_message, 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return error_response(error.description, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        logger.exception("Unhandled error")
        return error_response(AppError.default_message, 500)
