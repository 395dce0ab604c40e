from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from enum import Enum

from models.common import CamelModel


class UserRoleEnum(str, Enum):
    """
    Enum para roles de utilizador - garante type-safety e evita magic strings.
    Herda de str para ser serializável em JSON automaticamente.
    """
    AGENT = "agent"
    ADMIN = "admin"

    @classmethod
    def from_string(cls, role: str) -> "UserRoleEnum":
        """Converte string para enum, com fallback para AGENT."""
        try:
            return cls(role.lower()) if role else cls.AGENT
        except ValueError:
            return cls.AGENT


class UserRole:
    """
    Classe helper para verificações de permissões.
    """
    AGENT = UserRoleEnum.AGENT.value
    ADMIN = UserRoleEnum.ADMIN.value


def display_name(last_name: Optional[str], first_name: Optional[str]) -> str:
    """Nome de apresentação do agente ("apelido nome")."""
    if last_name and first_name:
        return f"{last_name} {first_name}"
    return last_name or first_name or "Unknown"


class UserRegister(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    last_name: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    avatar_url: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(CamelModel):
    last_name: Optional[str] = Field(default=None, min_length=1)
    first_name: Optional[str] = Field(default=None, min_length=1)
    avatar_url: Optional[str] = None


class UserResponse(CamelModel):
    """Agente - a colecção users serve também de directório de agentes"""
    id: str
    email: str
    last_name: str = ""
    first_name: str = ""
    name: str
    avatar_url: Optional[str] = None
    role: str = UserRole.AGENT
    is_active: Optional[bool] = True
    created_at: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


def user_response_from_doc(user: dict) -> UserResponse:
    """Converte o documento da colecção users na resposta pública (sem password)."""
    return UserResponse(
        id=user["id"],
        email=user["email"],
        last_name=user.get("lastName") or "",
        first_name=user.get("firstName") or "",
        name=user.get("name") or display_name(user.get("lastName"), user.get("firstName")),
        avatar_url=user.get("avatarUrl"),
        role=UserRoleEnum.from_string(user.get("role")).value,
        is_active=user.get("isActive", True),
        created_at=user.get("createdAt"),
    )
