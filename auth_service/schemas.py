"""Modelos Pydantic (schemas) para validación de datos de entrada/salida en el Servicio de Autenticación."""

from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

# --- Schemas de Usuario ---

class UserCreate(BaseModel):
    """Petición de creación: la contraseña llega en texto plano y siempre se hashea."""
    name: str = Field(..., description="Nombre del usuario")
    email: str = Field(..., description="Email único del usuario")
    password: str = Field(..., description="Contraseña en texto plano")


class UserUpdate(BaseModel):
    """
    Petición de actualización explícita.
    Solo se modifican los campos presentes; la contraseña se hashea únicamente si viene.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    """Datos públicos del usuario (excluye el hash de la contraseña)."""
    id: str = Field(..., alias="_id")
    name: str
    email: str

    # Permite mapeo desde modelos ORM (SQLAlchemy)
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AuthResponse(UserResponse):
    """Respuesta de registro y login: usuario más token de acceso."""
    token: str


class MessageResponse(BaseModel):
    message: str


# --- Schemas de Token ---

class TokenPayload(BaseModel):
    """Payload decodificado de un token válido."""
    id: str
    iat: Optional[int] = None
    exp: Optional[int] = None
