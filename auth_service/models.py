"""Define el modelo de la tabla 'users' usando SQLAlchemy ORM."""

import uuid
from sqlalchemy import Column, String
from auth_service.db import Base


def generate_user_id() -> str:
    """Identificador opaco y único (UUID4 en hexadecimal)."""
    return uuid.uuid4().hex


class User(Base):
    """
    Modelo SQLAlchemy que representa la tabla 'users' en la base de datos.
    Almacena la información de autenticación de los usuarios.
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_user_id)

    name = Column(String(255), nullable=False)

    # Único a nivel de índice: garantiza la unicidad aun con registros concurrentes
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Hash bcrypt de la contraseña, nunca el texto plano
    password_hash = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
