"""Funciones de utilidad para el servicio de autenticación: hash de contraseñas y manejo de JWT."""

import logging
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
from jose import ExpiredSignatureError, JWTError, jwt
from typing import Dict, Optional

from auth_service.config import BCRYPT_ROUNDS
from auth_service.exceptions import TokenExpired, TokenInvalid

# Configuración del logger
logger = logging.getLogger(__name__)

# --- Hash de contraseñas ---
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


# bcrypt solo considera los primeros 72 bytes de la contraseña
MAX_PASSWORD_BYTES = 72


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def get_password_hash(password: str) -> str:
    """Genera el hash (bcrypt, con sal) de una contraseña plana."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verifica una contraseña plana contra un hash almacenado.
    La comparación la hace bcrypt en tiempo constante; un hash corrupto nunca coincide.
    Una contraseña de más de 72 bytes nunca coincide: bcrypt la truncaría.
    """
    if isinstance(plain_password, str) and password_too_long(plain_password):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning(f"Hash de contraseña no verificable: {e}")
        return False


def is_password_hash(value: Optional[str]) -> bool:
    """True si `value` es un hash reconocido por el contexto (bcrypt)."""
    if not value:
        return False
    return pwd_context.identify(value) is not None


def ensure_password_hash(password: str, stored_hash: Optional[str] = None) -> str:
    """
    Devuelve el hash a guardar para `password`.
    Si el valor recibido es exactamente el hash ya almacenado, no se vuelve a hashear.
    """
    if stored_hash is not None and password == stored_hash and is_password_hash(stored_hash):
        return stored_hash
    return get_password_hash(password)


# --- Utilidades para Tokens JWT ---
class TokenManager:
    """
    Emite y valida tokens JWT firmados con un secreto del servidor.
    El secreto se inyecta al construir; nunca se registra en logs ni se devuelve.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expires_delta: timedelta = timedelta(hours=1)):
        if not secret:
            raise ValueError("Se requiere un secreto para firmar tokens")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def __repr__(self):
        return f"TokenManager(algorithm={self.algorithm!r}, expires_delta={self.expires_delta!r})"

    def issue_token(self, subject_id: str, now: Optional[datetime] = None) -> str:
        """
        Genera un token con payload `{id, iat, exp}`.

        Args:
            subject_id: Identificador del usuario.
            now: Instante de emisión (por defecto, ahora en UTC).

        Returns:
            String del JWT codificado.
        """
        issued_at = now or datetime.now(timezone.utc)
        to_encode = {
            "id": str(subject_id),
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
        }
        return jwt.encode(to_encode, self._secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict:
        """
        Decodifica y valida firma y expiración.

        Raises:
            TokenExpired: si el token ya expiró.
            TokenInvalid: firma incorrecta, formato inválido o sin claim `id`.
        """
        if not isinstance(token, str) or not token:
            raise TokenInvalid()
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.warning("Fallo en decodificación de token: El token ha expirado.")
            raise TokenExpired()
        except JWTError as e:
            logger.warning(f"Fallo en decodificación de token: {e}")
            raise TokenInvalid()

        if not payload.get("id"):
            logger.warning("Token sin claim 'id'.")
            raise TokenInvalid()
        return payload

    def verify_token(self, token: str) -> str:
        """Devuelve el identificador del usuario contenido en un token válido."""
        return self.decode_token(token)["id"]
