"""Almacén de credenciales: persistencia de usuarios con email único."""

import logging
from typing import List, Optional
from sqlalchemy import exc
from sqlalchemy.orm import Session

from auth_service.exceptions import CreateFailed, DuplicateEmail, UpdateFailed, UserNotFound
from auth_service.models import User
from auth_service.schemas import UserCreate, UserUpdate
from auth_service.utils import (
    MAX_PASSWORD_BYTES,
    ensure_password_hash,
    get_password_hash,
    password_too_long,
)

logger = logging.getLogger(__name__)

REQUIRED_USER_FIELDS = ("name", "email", "password")


def _is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()


def missing_fields(data: UserCreate) -> List[str]:
    return [f for f in REQUIRED_USER_FIELDS if _is_blank(getattr(data, f, None))]


def blank_update_fields(data: UserUpdate) -> List[str]:
    """Campos presentes en la actualización pero vacíos."""
    return [f for f in REQUIRED_USER_FIELDS if getattr(data, f, None) is not None and _is_blank(getattr(data, f))]


def validate_required_fields(data: UserCreate) -> None:
    """Valida los campos obligatorios antes de cualquier escritura."""
    missing = missing_fields(data)
    if missing:
        logger.warning(f"Creación rechazada, faltan campos: {', '.join(missing)}")
        raise CreateFailed(f"No se pudo crear el usuario. Faltan campos: {', '.join(missing)}")
    if password_too_long(data.password):
        logger.warning("Creación rechazada: contraseña demasiado larga.")
        raise CreateFailed(f"No se pudo crear el usuario. La contraseña supera los {MAX_PASSWORD_BYTES} bytes")


def validate_update_fields(data: UserUpdate) -> None:
    """Mismas reglas que en la creación, aplicadas solo a los campos presentes."""
    blank = blank_update_fields(data)
    if blank:
        logger.warning(f"Actualización rechazada, campos vacíos: {', '.join(blank)}")
        raise UpdateFailed(f"No se pudo actualizar el usuario. Campos vacíos: {', '.join(blank)}")
    if data.password is not None and password_too_long(data.password):
        logger.warning("Actualización rechazada: contraseña demasiado larga.")
        raise UpdateFailed(f"No se pudo actualizar el usuario. La contraseña supera los {MAX_PASSWORD_BYTES} bytes")


class CredentialStore:
    """
    Acceso a la tabla de usuarios dentro de una sesión.
    La unicidad del email la garantiza el índice único: el insert es la comprobación atómica.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def create(self, data: UserCreate) -> User:
        """
        Crea un usuario. La contraseña siempre se hashea.

        Raises:
            CreateFailed: faltan campos, la contraseña es demasiado larga o la base de datos rechazó el insert.
            DuplicateEmail: ya existe un usuario con ese email.
        """
        validate_required_fields(data)

        new_user = User(
            name=data.name,
            email=data.email,
            password_hash=get_password_hash(data.password),
        )
        try:
            self.db.add(new_user)
            self.db.commit()
            self.db.refresh(new_user)
        except exc.IntegrityError:
            self.db.rollback()
            logger.warning(f"Email duplicado al insertar: {data.email}")
            raise DuplicateEmail()
        except exc.SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error de base de datos al crear usuario {data.email}: {e}", exc_info=True)
            raise CreateFailed()

        logger.info(f"Usuario creado con ID: {new_user.id} para email: {new_user.email}")
        return new_user

    def update(self, user_id: str, data: UserUpdate) -> User:
        """
        Aplica una actualización explícita. Solo se tocan los campos presentes;
        la contraseña se hashea solo si viene y no es el mismo hash ya guardado.

        Raises:
            UpdateFailed: un campo presente está vacío o la base de datos rechazó el cambio.
            DuplicateEmail: el nuevo email ya pertenece a otro usuario.
            UserNotFound: no existe un usuario con ese id.
        """
        validate_update_fields(data)

        user = self.find_by_id(user_id)
        if user is None:
            raise UserNotFound()

        if data.name is not None:
            user.name = data.name
        if data.email is not None:
            user.email = data.email
        if data.password is not None:
            user.password_hash = ensure_password_hash(data.password, user.password_hash)

        try:
            self.db.commit()
            self.db.refresh(user)
        except exc.IntegrityError:
            self.db.rollback()
            logger.warning(f"Actualización rechazada: email {data.email} ya registrado.")
            raise DuplicateEmail()
        except exc.SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error de base de datos al actualizar usuario {user_id}: {e}", exc_info=True)
            raise UpdateFailed()

        logger.info(f"Usuario {user.id} actualizado.")
        return user
