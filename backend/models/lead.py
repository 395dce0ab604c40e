"""
Modelo de dados para Leads (clientes potenciais) e o seu ciclo de vida
"""
import re
from datetime import datetime
from typing import Optional, List
from enum import Enum

from pydantic import EmailStr, Field, field_validator

from models.common import CamelModel, reject_null


class LeadStatus(str, Enum):
    """
    Estados fixos de um lead. Os ids nunca mudam; apenas o label/cor são configuráveis.
    Qualquer estado pode passar para qualquer outro (Closed é terminal só por convenção).
    """
    NEW = "New"
    SENT = "Sent"
    SCHEDULED = "Scheduled"
    VIEWED = "Viewed"
    NEGOTIATING = "Negotiating"
    CLOSED = "Closed"


# Ordem canónica dos estados
LEAD_STATUSES = [s.value for s in LeadStatus]

# Estados que contam como pipeline activo ("見込み")
PIPELINE_STATUSES = [
    LeadStatus.NEGOTIATING.value,
    LeadStatus.SCHEDULED.value,
    LeadStatus.VIEWED.value,
]


class LeadPriority(str, Enum):
    HIGH = "High"
    MID = "Mid"
    LOW = "Low"


class LeadType(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class ActivityType(str, Enum):
    CALL = "Call"
    EMAIL = "Email"
    MEETING = "Meeting"
    VISIT = "Visit"
    NOTE = "Note"


class SearchFrequency(str, Enum):
    THREE_DAYS = "3days"
    ONE_WEEK = "1week"
    TWO_WEEKS = "2week"


# Configuração por defeito (labels/cores por deployment, ver settings/statuses)
DEFAULT_STATUS_CONFIG = [
    {"id": "New", "label": "新規", "color": "#cbd5e1", "order": 1},
    {"id": "Sent", "label": "資料送付", "color": "#8b5cf6", "order": 2},
    {"id": "Scheduled", "label": "案内予定", "color": "#6366f1", "order": 3},
    {"id": "Viewed", "label": "内見済", "color": "#3b82f6", "order": 4},
    {"id": "Negotiating", "label": "商談中", "color": "#f59e0b", "order": 5},
    {"id": "Closed", "label": "成約", "color": "#10b981", "order": 6},
]

PRIORITY_COLUMNS = [
    {"id": "High", "label": "高", "color": "#ef4444", "order": 1},
    {"id": "Mid", "label": "中", "color": "#eab308", "order": 2},
    {"id": "Low", "label": "低", "color": "#64748b", "order": 3},
]

MAX_PREFERRED_CHOICES = 3

_PHONE_RE = re.compile(r"^[0-9-]+$")
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class StatusConfig(CamelModel):
    """Apresentação de um estado (label, cor e ordem da coluna)"""
    id: LeadStatus
    label: str = Field(min_length=1)
    color: str
    order: int

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if not _COLOR_RE.match(v):
            raise ValueError("Cor inválida (formato #rrggbb)")
        return v


class Activity(CamelModel):
    """Registo de contacto comercial, embebido no lead"""
    id: str
    type: ActivityType
    timestamp: str
    content: str
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None


class ActivityInput(CamelModel):
    """Dados para criar/editar um registo de actividade"""
    type: ActivityType = ActivityType.CALL
    timestamp: Optional[datetime] = None  # por defeito agora
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("O conteúdo é obrigatório")
        return v


class InquiredProperty(CamelModel):
    """Snapshot histórico (só leitura) de um imóvel consultado pelo lead"""
    id: str
    name: str
    address: str
    price: float
    inquired_at: str


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


def _check_phone(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if len(v) < 10:
        raise ValueError("O telefone deve ter pelo menos 10 caracteres")
    if not _PHONE_RE.match(v):
        raise ValueError("Apenas dígitos e hífens são permitidos")
    return v


def _check_status(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in LEAD_STATUSES:
        raise ValueError(f"Estado inválido: {v}")
    return v


class LeadCriteria(CamelModel):
    """Critérios de pesquisa e restantes campos opcionais do formulário"""
    name_kana: Optional[str] = None
    email: Optional[EmailStr] = None
    lead_type: LeadType = LeadType.BUY
    priority: LeadPriority = LeadPriority.MID
    source: Optional[str] = None

    budget: float = Field(default=0, ge=0)
    discount_rate: float = Field(default=1.0, ge=0, le=100)

    # Ordem significa 1ª, 2ª e 3ª escolha
    areas: List[str] = Field(default_factory=list, max_length=MAX_PREFERRED_CHOICES)
    stations: List[str] = Field(default_factory=list, max_length=MAX_PREFERRED_CHOICES)
    desired_property_types: List[str] = Field(default_factory=list)
    size: Optional[float] = Field(default=None, ge=0)
    layout: List[str] = Field(default_factory=list)
    built_year: Optional[int] = Field(default=None, ge=0)
    pets_allowed: Optional[bool] = None
    car_owned: Optional[bool] = None
    parking_needed: Optional[bool] = None
    floor_level: Optional[str] = None
    is_search_requested: Optional[bool] = None
    search_frequency: Optional[SearchFrequency] = None
    move_in_date: Optional[str] = None

    family_structure: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    comm_tool: Optional[str] = None

    agent_name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    memo: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _blank_to_none(v)


class LeadCreate(LeadCriteria):
    """Formulário de registo. Obrigatórios: nome, telefone, agente e estado."""
    name: str = Field(min_length=1)
    phone: str
    agent_id: str = Field(min_length=1)
    status: str = LeadStatus.NEW.value

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _check_phone(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return _check_status(v)


class LeadUpdate(CamelModel):
    """Edição parcial (inline) - só os campos enviados são alterados"""
    name: Optional[str] = Field(default=None, min_length=1)
    name_kana: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    lead_type: Optional[LeadType] = None
    status: Optional[str] = None
    priority: Optional[LeadPriority] = None
    source: Optional[str] = None
    budget: Optional[float] = Field(default=None, ge=0)
    discount_rate: Optional[float] = Field(default=None, ge=0, le=100)
    areas: Optional[List[str]] = Field(default=None, max_length=MAX_PREFERRED_CHOICES)
    stations: Optional[List[str]] = Field(default=None, max_length=MAX_PREFERRED_CHOICES)
    desired_property_types: Optional[List[str]] = None
    size: Optional[float] = Field(default=None, ge=0)
    layout: Optional[List[str]] = None
    built_year: Optional[int] = Field(default=None, ge=0)
    pets_allowed: Optional[bool] = None
    car_owned: Optional[bool] = None
    parking_needed: Optional[bool] = None
    floor_level: Optional[str] = None
    is_search_requested: Optional[bool] = None
    search_frequency: Optional[SearchFrequency] = None
    move_in_date: Optional[str] = None
    family_structure: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    comm_tool: Optional[str] = None
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    tags: Optional[List[str]] = None
    memo: Optional[str] = None

    @field_validator(
        "name", "phone", "lead_type", "status", "priority", "budget", "discount_rate",
        "areas", "stations", "desired_property_types", "layout", "agent_id", "tags",
        mode="before",
    )
    @classmethod
    def required_not_null(cls, v):
        return reject_null(v)

    @field_validator("email", mode="before")
    @classmethod
    def empty_email(cls, v):
        return _blank_to_none(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return _check_status(v)


class Lead(CamelModel):
    """Lead completo, tal como lido da BD"""
    id: str
    name: str
    name_kana: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    lead_type: LeadType = LeadType.BUY
    # Pode conter um id que já não está configurado - é mostrado tal como está
    status: str = LeadStatus.NEW.value
    priority: LeadPriority = LeadPriority.MID
    source: Optional[str] = None
    budget: float = 0
    discount_rate: float = 1.0
    areas: List[str] = []
    stations: List[str] = []
    desired_property_types: List[str] = []
    size: Optional[float] = None
    layout: List[str] = []
    built_year: Optional[int] = None
    pets_allowed: Optional[bool] = None
    car_owned: Optional[bool] = None
    parking_needed: Optional[bool] = None
    floor_level: Optional[str] = None
    is_search_requested: Optional[bool] = None
    search_frequency: Optional[SearchFrequency] = None
    move_in_date: Optional[str] = None
    family_structure: Optional[str] = None
    age: Optional[int] = None
    comm_tool: Optional[str] = None
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    tags: List[str] = []
    memo: Optional[str] = None
    activities: List[Activity] = []
    inquired_properties: List[InquiredProperty] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class LeadMove(CamelModel):
    """Gesto de drag & drop: card arrastado para uma coluna ou sobre outro card"""
    over_id: Optional[str] = None
    group_by: str = "status"

    @field_validator("group_by")
    @classmethod
    def validate_group_by(cls, v: str) -> str:
        if v not in ("status", "priority"):
            raise ValueError("group_by deve ser 'status' ou 'priority'")
        return v
