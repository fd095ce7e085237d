"""Errores del dominio de autenticación. Cada uno lleva el código HTTP con el que se responde."""

from fastapi import status


class AuthError(Exception):
    """Error base: termina la petición con `{"message": ...}` y `status_code`."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Error de autenticación"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class DuplicateEmail(AuthError):
    default_message = "El email ya está registrado"


class UserExists(DuplicateEmail):
    default_message = "El usuario ya existe"


class CreateFailed(AuthError):
    default_message = "No se pudo crear el usuario."


class UpdateFailed(AuthError):
    default_message = "No se pudo actualizar el usuario."


class UserNotFound(AuthError):
    default_message = "Usuario no existe"


class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Contraseña incorrecta"


class TokenInvalid(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token inválido"


class TokenExpired(TokenInvalid):
    default_message = "Token expirado"


class InternalError(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Error interno del servidor"

    @classmethod
    def from_exception(cls, exc: Exception) -> "InternalError":
        # Se expone la causa tal cual para diagnóstico del operador
        return cls(f"Error: {exc}")
