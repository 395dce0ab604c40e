"""
Tests for CRM Imobiliário API
Configuração central dos testes.
"""
import os
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

# Definir ambiente de teste ANTES de importar a app
os.environ["TESTING"] = "true"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-pytest-only")
os.environ.setdefault("MONGO_URL", "mongodb://localhost:27017")
os.environ.setdefault("DB_NAME", "crm_test")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

# Adicionar backend ao path
sys.path.insert(0, str(Path(__file__).parent.parent))

import database  # noqa: E402
from server import app  # noqa: E402
from middleware.rate_limit import limiter  # noqa: E402
from services.auth import create_token, hash_password  # noqa: E402
from services.status_config import status_store  # noqa: E402

# URL fictício para os testes
API_URL = "http://testserver/api"


@pytest.fixture(autouse=True)
def mock_db():
    """BD em memória, nova para cada teste."""
    mock_database = AsyncMongoMockClient()["crm_test"]
    database.set_database(mock_database)
    status_store.invalidate()
    yield mock_database
    status_store.invalidate()
    database.set_database(None)


@pytest_asyncio.fixture(scope="function")
async def client():
    """
    Cliente HTTP assíncrono que fala DIRETAMENTE com a app.
    """
    limiter.enabled = False

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url=API_URL,
        timeout=30.0
    ) as ac:
        yield ac


async def _create_user(db, email: str, last_name: str, first_name: str, role: str) -> dict:
    """Cria um utilizador de teste diretamente na DB."""
    user = {
        "id": str(uuid.uuid4()),
        "email": email,
        "password": hash_password("password123"),
        "lastName": last_name,
        "firstName": first_name,
        "name": f"{last_name} {first_name}",
        "role": role,
        "isActive": True,
        "createdAt": datetime.now(timezone.utc).isoformat(),
    }
    await db.users.insert_one(dict(user))
    return user


def _headers(user: dict) -> dict:
    token = create_token(user["id"], user["email"], user["role"])
    return {"Authorization": f"Bearer {token}"}


# --- Fixtures de Autenticação ---

@pytest_asyncio.fixture
async def agent_user(mock_db):
    return await _create_user(mock_db, "sato@example.com", "佐藤", "健", "agent")


@pytest_asyncio.fixture
async def admin_user(mock_db):
    return await _create_user(mock_db, "admin@example.com", "管理", "者", "admin")


@pytest.fixture
def agent_headers(agent_user):
    return _headers(agent_user)


@pytest.fixture
def admin_headers(admin_user):
    return _headers(admin_user)


@pytest.fixture
def lead_payload(agent_user):
    """Formulário mínimo válido de registo de lead."""
    return {
        "name": "田中 太郎",
        "phone": "090-1234-5678",
        "agentId": agent_user["id"],
        "status": "New",
        "budget": 50000000,
        "tags": ["初回"],
    }
