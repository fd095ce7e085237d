import logging
import time
from datetime import timedelta
from typing import Optional
import uvicorn
from fastapi import APIRouter, FastAPI, Depends, status, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.orm import Session

# Importaciones locales
from auth_service import schemas
from auth_service.config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    CORS_ORIGINS,
    JWT_ALGORITHM,
    JWT_SECRET,
    PORT,
)
from auth_service.db import check_connection, engine, ensure_tables, get_db
from auth_service.exceptions import AuthError, TokenInvalid
from auth_service.service import AuthService
from auth_service.store import CredentialStore
from auth_service.utils import TokenManager

# Configura logger
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# Conecta y crea tablas al iniciar; si falla, el servicio sigue levantado
# y las tablas se crean en la primera petición con la base disponible
if check_connection(engine):
    ensure_tables(engine)

token_manager = TokenManager(
    secret=JWT_SECRET,
    algorithm=JWT_ALGORITHM,
    expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
)

bearer_scheme = HTTPBearer(auto_error=False)

# Inicializa FastAPI
app = FastAPI(
    title="Auth Service",
    description="Handles user registration, login and bearer token verification.",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Métricas Prometheus ---
REQUEST_COUNT = Counter(
    "auth_requests_total",
    "Total requests processed by Auth Service",
    ["method", "endpoint", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "auth_request_latency_seconds",
    "Request latency in seconds for Auth Service",
    ["endpoint"]
)

# --- Middleware para Métricas y log de peticiones ---
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    response = None
    status_code = 500 # Default a 500

    try:
        response = await call_next(request)
        status_code = response.status_code
    except Exception as exc:
        logger.error(f"Unhandled exception during request processing: {exc}", exc_info=True)
        response = JSONResponse(status_code=500, content={"message": f"Error: {exc}"})
    finally:
        latency = time.time() - start_time
        endpoint = request.url.path

        REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()
        logger.info(f"{request.method} {endpoint} {status_code} {latency * 1000:.1f} ms")

    return response


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    """Toda falla del dominio se responde como `{"message": ...}` con su código."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, TokenInvalid) else None
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message}, headers=headers)


# --- Dependencias ---
def get_token_manager() -> TokenManager:
    return token_manager


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
) -> AuthService:
    return AuthService(CredentialStore(db), tokens)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise TokenInvalid("Token no proporcionado")
    return credentials.credentials


# --- Endpoints de Salud y Métricas ---
@app.get("/metrics", tags=["Monitoring"])
def metrics():
    """Exposes application metrics for Prometheus."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

@app.get("/health", tags=["Monitoring"])
def health_check():
    """Performs a basic health check of the service."""
    return {"status": "ok", "service": "auth_service"}


# --- Endpoints de API ---
router = APIRouter(prefix="/api/auth", tags=["Authentication"])

ERROR_RESPONSES = {
    400: {"model": schemas.MessageResponse},
    401: {"model": schemas.MessageResponse},
    500: {"model": schemas.MessageResponse},
}


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def register(user: schemas.UserCreate, service: AuthService = Depends(get_auth_service)):
    """Registers a new user and returns it with an access token."""
    return service.register(user.name, user.email, user.password)


@router.post("/login", response_model=schemas.AuthResponse, responses=ERROR_RESPONSES)
def login(credentials: schemas.LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Authenticates by email and password. Returns the user with an access token."""
    return service.login(credentials.email, credentials.password)


@router.get("/me", response_model=schemas.UserResponse, responses=ERROR_RESPONSES)
def me(token: str = Depends(get_bearer_token), service: AuthService = Depends(get_auth_service)):
    """Returns the user that owns the bearer token."""
    return service.get_current_user(token)


@router.get("/verify", response_model=schemas.TokenPayload, tags=["Internal"], responses=ERROR_RESPONSES)
def verify(token: str, tokens: TokenManager = Depends(get_token_manager)):
    """
    Valida un token (query parameter 'token') y devuelve su payload.
    Pensado para otros servicios que protegen rutas propias.
    """
    return tokens.decode_token(token)


app.include_router(router)


def run():
    logger.info(f"Servidor escuchando en el puerto: {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
