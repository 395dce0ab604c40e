"""
====================================================================
RATE LIMITING
====================================================================
Limites configuráveis por tipo de endpoint, por IP de cliente.
====================================================================
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from fastapi.responses import JSONResponse
import logging
import os

logger = logging.getLogger(__name__)


# Formato: "X/period" onde period pode ser: second, minute, hour, day
RATE_LIMITS = {
    # Autenticação - mais restritivo para prevenir brute force
    "auth": os.environ.get("RATE_LIMIT_AUTH", "10/minute"),

    # Registo de novos agentes
    "register": os.environ.get("RATE_LIMIT_REGISTER", "3/hour"),

    # Endpoints de escrita/modificação
    "write": os.environ.get("RATE_LIMIT_WRITE", "60/minute"),

    # Seed de dados de demonstração
    "seed": os.environ.get("RATE_LIMIT_SEED", "5/hour"),

    # Limite global default
    "default": os.environ.get("RATE_LIMIT_DEFAULT", "300/minute"),
}


def _get_client_ip(request: Request) -> str:
    """
    Obtém o IP real do cliente, considerando proxies.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    # X-Real-IP é usado por alguns proxies (ex: Nginx)
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return get_remote_address(request)


limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMITS["default"]],
    headers_enabled=False,
    strategy="fixed-window"
)


def limit_auth():
    """Rate limit para login."""
    return limiter.limit(RATE_LIMITS["auth"])


def limit_register():
    return limiter.limit(RATE_LIMITS["register"])


def limit_write():
    """Rate limit para endpoints de escrita."""
    return limiter.limit(RATE_LIMITS["write"])


def limit_seed():
    return limiter.limit(RATE_LIMITS["seed"])


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """
    Handler para quando o rate limit é excedido.
    Loga o evento e retorna resposta 429.
    """
    client_ip = _get_client_ip(request)

    logger.warning(
        f"Rate limit excedido | IP: {client_ip} | Path: {request.url.path} | "
        f"Limite: {exc.detail}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "Demasiadas requisições. Por favor aguarde.",
            "detail": str(exc.detail),
            "retry_after": "60 segundos"
        },
        headers={"Retry-After": "60"}
    )
