"""Lógica de autenticación: registro, login y ciclo de vida de tokens."""

import logging

from auth_service.exceptions import (
    AuthError,
    DuplicateEmail,
    InternalError,
    InvalidCredentials,
    UserExists,
    UserNotFound,
)
from auth_service.models import User
from auth_service.schemas import AuthResponse, UserCreate
from auth_service.store import CredentialStore
from auth_service.utils import TokenManager, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """
    Registro y login sobre un `CredentialStore`.
    Cada llamada es de un solo intento: no hay reintentos internos.
    """

    def __init__(self, store: CredentialStore, tokens: TokenManager):
        self.store = store
        self.tokens = tokens

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            id=user.id,
            name=user.name,
            email=user.email,
            token=self.tokens.issue_token(user.id),
        )

    def register(self, name: str, email: str, password: str) -> AuthResponse:
        """
        Registra un usuario y devuelve sus datos con un token.

        Raises:
            UserExists: el email ya está registrado (también si se pierde la carrera al insertar).
            CreateFailed: el almacén no pudo crear el usuario.
            InternalError: cualquier otro fallo, con la causa en el mensaje.
        """
        logger.info(f"Intento de registro para email: {email}")
        try:
            if self.store.find_by_email(email):
                logger.warning(f"Registro fallido: el email {email} ya existe.")
                raise UserExists()

            try:
                user = self.store.create(UserCreate(name=name, email=email, password=password))
            except DuplicateEmail:
                logger.warning(f"Registro fallido: el email {email} fue registrado concurrentemente.")
                raise UserExists() from None

            response = self._auth_response(user)
            logger.info(f"Registro exitoso para user_id: {user.id}")
            return response
        except AuthError:
            raise
        except Exception as e:
            logger.error(f"Error inesperado durante el registro de {email}: {e}", exc_info=True)
            raise InternalError.from_exception(e) from e

    def login(self, email: str, password: str) -> AuthResponse:
        """
        Autentica por email y contraseña.

        Raises:
            UserNotFound: no hay usuario con ese email.
            InvalidCredentials: la contraseña no coincide.
            InternalError: fallo inesperado del almacén o del hash.
        """
        logger.info(f"Intento de login para: {email}")
        try:
            user = self.store.find_by_email(email)
            if user is None:
                logger.warning(f"Login fallido: usuario {email} no existe.")
                raise UserNotFound()

            if not verify_password(password, user.password_hash):
                logger.warning(f"Login fallido: contraseña incorrecta para {email}.")
                raise InvalidCredentials()

            response = self._auth_response(user)
            logger.info(f"Login exitoso para user_id: {user.id}")
            return response
        except AuthError:
            raise
        except Exception as e:
            logger.error(f"Error inesperado durante el login de {email}: {e}", exc_info=True)
            raise InternalError.from_exception(e) from e

    def verify_token(self, token: str) -> str:
        """Devuelve el id del usuario del token. Lanza TokenInvalid / TokenExpired."""
        return self.tokens.verify_token(token)

    def get_current_user(self, token: str) -> User:
        """Resuelve el usuario dueño de un token válido."""
        user_id = self.verify_token(token)
        user = self.store.find_by_id(user_id)
        if user is None:
            logger.warning(f"Token válido para un usuario inexistente: {user_id}")
            raise UserNotFound()
        return user
