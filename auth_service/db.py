"""Configuración de la conexión a la base de datos usando SQLAlchemy."""

import logging
import threading
from sqlalchemy import create_engine, exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from auth_service.config import DATABASE_URL

# Configuración del logger
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Clase base para los modelos declarativos
Base = declarative_base()


def create_db_engine(url: str) -> Engine:
    """
    Crea el motor (Engine) de SQLAlchemy para `url`.
    pool_pre_ping=True ayuda a manejar conexiones inactivas en el pool.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        # SQLite comparte la conexión entre los hilos del threadpool de FastAPI
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def check_connection(engine: Engine) -> bool:
    """Intenta conectar y registra el resultado. Nunca lanza: el servicio sigue atendiendo."""
    try:
        with engine.connect():
            logger.info("Conexión a la base de datos establecida exitosamente.")
        return True
    except exc.SQLAlchemyError as e:
        logger.error(f"Error al conectar con la base de datos: {e}", exc_info=True)
        return False


def init_db(engine: Engine) -> bool:
    """Crea las tablas si no existen. Devuelve False si la base no respondió."""
    # Registra los modelos en Base.metadata
    from auth_service import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tablas de la base de datos verificadas/creadas.")
        return True
    except exc.SQLAlchemyError as e:
        logger.error(f"Error inicializando la base de datos: {e}", exc_info=True)
        return False


# Motores cuyas tablas ya se verificaron
_initialized_engines = set()
_init_lock = threading.Lock()


def ensure_tables(engine: Engine) -> bool:
    """
    Crea las tablas la primera vez que la base responde.
    Tras un fallo se reintenta en la siguiente llamada.
    """
    if engine in _initialized_engines:
        return True
    with _init_lock:
        if engine in _initialized_engines:
            return True
        if init_db(engine):
            _initialized_engines.add(engine)
            return True
        return False


def make_session_dependency(engine: Engine):
    """
    Construye la dependencia de FastAPI que entrega una sesión por petición sobre `engine`.
    Revierte la transacción si la petición falla y siempre cierra la sesión.
    """
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def get_db():
        ensure_tables(engine)
        db = session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    return get_db


engine = create_db_engine(DATABASE_URL)

# --- Función de Dependencia para FastAPI ---
# Cada petición web usa su propia sesión.
get_db = make_session_dependency(engine)
