"""Configuración del servicio de autenticación leída desde variables de entorno (.env)."""

import os
import logging
from dotenv import load_dotenv

# Configuración del logger
logger = logging.getLogger(__name__)

# Carga variables de entorno desde .env
load_dotenv()

# --- Seguridad / JWT ---
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    logger.warning("JWT_SECRET no está definida en las variables de entorno. Usando clave insegura por defecto para desarrollo.")
    JWT_SECRET = "clave_secreta_insegura_por_defecto_cambiar_urgentemente"

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

# El token expira 1 hora después de emitido
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# Costo de bcrypt (equivalente a "10 rounds")
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", 10))

# --- Base de datos ---
def build_database_url() -> str:
    """
    Resuelve la cadena de conexión.
    DATABASE_URL tiene prioridad; si no existe y están todas las variables DB_*,
    se arma una URL para MariaDB. En otro caso se usa SQLite local.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    required_db_vars = {"DB_USER", "DB_PASS", "DB_HOST", "DB_NAME"}
    missing_vars = required_db_vars - set(os.environ)
    if not missing_vars:
        return (
            f"mysql+pymysql://{os.getenv('DB_USER')}:{os.getenv('DB_PASS')}"
            f"@{os.getenv('DB_HOST')}/{os.getenv('DB_NAME')}"
        )

    if len(missing_vars) < len(required_db_vars):
        logger.error(f"Faltan variables de entorno para la base de datos: {', '.join(sorted(missing_vars))}")
    return "sqlite:///./auth.db"


DATABASE_URL = build_database_url()

# --- Servidor HTTP ---
PORT = int(os.getenv("PORT", 3000))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
