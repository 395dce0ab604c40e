"""
====================================================================
CRM IMOBILIÁRIO - BACKEND SERVER
====================================================================
Gestão de leads, imóveis e objectivos de receita de uma equipa de
agentes imobiliários.

Observabilidade: Sentry SDK para error tracking e performance monitoring
====================================================================
"""
import logging
from datetime import datetime, timezone

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from sentry_sdk.integrations.pymongo import PyMongoIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from config import (
    CORS_ORIGINS, CORS_ALLOW_CREDENTIALS, CORS_ALLOW_METHODS,
    CORS_ALLOW_HEADERS, CORS_MAX_AGE,
    SENTRY_DSN, SENTRY_ENVIRONMENT, SENTRY_TRACES_SAMPLE_RATE,
    SENTRY_PROFILES_SAMPLE_RATE, SENTRY_SEND_DEFAULT_PII
)
from database import db, client
from middleware.rate_limit import limiter, rate_limit_exceeded_handler
from routes import (
    auth_router, leads_router, properties_router, dashboard_router,
    settings_router, dev_router, websocket_router
)
from services.db_indexes import create_indexes


def _sentry_before_send(event, hint):
    if "exception" in event:
        exc_type = event.get("exception", {}).get("values", [{}])[0].get("type", "")
        if exc_type in ["RateLimitExceeded"]:
            return None
    if "request" in event and "headers" in event["request"]:
        headers = event["request"]["headers"]
        sensitive_headers = ["authorization", "cookie", "x-api-key"]
        for header in sensitive_headers:
            if header in headers:
                headers[header] = "[FILTERED]"
    return event


# ====================================================================
# SENTRY INITIALIZATION (antes de qualquer outra coisa)
# ====================================================================
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        environment=SENTRY_ENVIRONMENT,
        traces_sample_rate=SENTRY_TRACES_SAMPLE_RATE,
        profiles_sample_rate=SENTRY_PROFILES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            PyMongoIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        send_default_pii=SENTRY_SEND_DEFAULT_PII,
        before_send=_sentry_before_send,
        release=f"realestate-crm@{datetime.now().strftime('%Y.%m.%d')}",
        attach_stacktrace=True,
        debug=SENTRY_ENVIRONMENT == "development",
    )

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="CRM Imobiliário")

# Usar o limiter do middleware (os testes desligam este mesmo objecto)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Todas as rotas sob /api
for router in (
    auth_router, leads_router, properties_router, dashboard_router,
    settings_router, dev_router, websocket_router,
):
    app.include_router(router, prefix="/api")


# ====================================================================
# HEALTH CHECK ENDPOINTS
# ====================================================================
@app.get("/health")
async def health_check():
    components = {}
    is_healthy = True

    try:
        await db.command("ping")
        components["mongodb"] = {"status": "up"}
    except Exception as e:
        components["mongodb"] = {"status": "down", "error": str(e)[:100]}
        is_healthy = False
        logger.error(f"[HEALTH] MongoDB down: {str(e)}")

    if is_healthy:
        try:
            unresolved = await db.system_error_logs.count_documents({"resolved": False})
            components["systemErrors"] = {"status": "up", "unresolved": unresolved}
        except Exception as e:
            components["systemErrors"] = {"status": "unknown", "error": str(e)[:100]}

    response_data = {
        "status": "healthy" if is_healthy else "unhealthy",
        "components": components,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }

    if not is_healthy:
        return JSONResponse(status_code=503, content=response_data)
    return response_data


@app.get("/health/live")
async def liveness_probe():
    return {"status": "alive"}


app.add_middleware(
    CORSMiddleware,
    allow_credentials=CORS_ALLOW_CREDENTIALS,
    allow_origins=CORS_ORIGINS,
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
    max_age=CORS_MAX_AGE,
)


@app.on_event("startup")
async def startup():
    logger.info("🚀 Iniciando CRM Imobiliário...")
    try:
        await create_indexes(db)
    except Exception as e:
        logger.error(f"Erro ao criar indexes: {e}")


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()
