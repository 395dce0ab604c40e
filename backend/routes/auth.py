import uuid
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, Request

from database import db
from models.auth import (
    UserRole, UserRegister, UserLogin, ProfileUpdate, UserResponse, TokenResponse,
    display_name, user_response_from_doc
)
from services.auth import (
    hash_password, verify_password, create_token, get_current_user
)
from services.realtime import USERS_CHANNEL, broker
from middleware.rate_limit import limit_auth, limit_register


router = APIRouter(prefix="/auth", tags=["Auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=TokenResponse)
@limit_register()
async def register(request: Request, data: UserRegister):
    """Regista um novo agente (entra na lista de agentes)."""
    existing = await db.users.find_one({"email": data.email})
    if existing:
        raise HTTPException(status_code=400, detail="Email já registado")

    user_id = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()

    user_doc = {
        "id": user_id,
        "email": data.email,
        "password": hash_password(data.password),
        "lastName": data.last_name,
        "firstName": data.first_name,
        "name": display_name(data.last_name, data.first_name),
        "avatarUrl": data.avatar_url,
        "role": UserRole.AGENT,
        "isActive": True,
        "createdAt": now,
    }

    await db.users.insert_one(user_doc)
    logger.info(f"Novo agente registado: {data.email}")
    await broker.publish(USERS_CHANNEL, {"id": user_id})

    token = create_token(user_id, data.email, UserRole.AGENT)
    return TokenResponse(access_token=token, user=user_response_from_doc(user_doc))


@router.post("/login", response_model=TokenResponse)
@limit_auth()
async def login(request: Request, data: UserLogin):
    user = await db.users.find_one({"email": data.email}, {"_id": 0})
    if not user:
        raise HTTPException(status_code=401, detail="Credenciais inválidas")

    if not verify_password(data.password, user.get("password", "")):
        raise HTTPException(status_code=401, detail="Credenciais inválidas")

    if not user.get("isActive", True):
        raise HTTPException(status_code=401, detail="Conta desativada")

    token = create_token(user["id"], user["email"], user.get("role", UserRole.AGENT))
    return TokenResponse(access_token=token, user=user_response_from_doc(user))


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Retorna o utilizador autenticado."""
    return user_response_from_doc(user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    user: dict = Depends(get_current_user)
):
    """
    Permite ao agente completar/atualizar o seu perfil (apelido, nome e avatar).
    Os leads já atribuídos mantêm o nome desnormalizado anterior.
    """
    update_data = data.to_document(exclude_unset=True)
    update_data = {k: v for k, v in update_data.items() if v is not None}

    if not update_data:
        raise HTTPException(status_code=400, detail="Nenhum campo válido para atualizar")

    last_name = update_data.get("lastName", user.get("lastName"))
    first_name = update_data.get("firstName", user.get("firstName"))
    update_data["name"] = display_name(last_name, first_name)
    update_data["updatedAt"] = datetime.now(timezone.utc).isoformat()

    result = await db.users.update_one({"id": user["id"]}, {"$set": update_data})
    if result.matched_count == 0:
        raise HTTPException(status_code=404, detail="Utilizador não encontrado")

    await broker.publish(USERS_CHANNEL, {"id": user["id"]})
    updated_user = await db.users.find_one({"id": user["id"]}, {"_id": 0, "password": 0})
    return user_response_from_doc(updated_user)
