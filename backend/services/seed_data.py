"""
====================================================================
DADOS DE DEMONSTRAÇÃO
====================================================================
Leads de exemplo com ids fixos. A operação de seed grava-os todos
numa única escrita em lote (upsert por id), pelo que pode ser
repetida sem criar duplicados.
====================================================================
"""
import copy
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from pymongo import ReplaceOne

logger = logging.getLogger(__name__)

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)

# Agentes de demonstração (criados por seed.py)
SEED_AGENTS = [
    {"id": "agent-sato", "lastName": "佐藤", "firstName": "エージェント", "email": "sato@example.com"},
    {"id": "agent-suzuki", "lastName": "鈴木", "firstName": "エージェント", "email": "suzuki@example.com"},
    {"id": "agent-tanaka", "lastName": "田中", "firstName": "エージェント", "email": "tanaka@example.com"},
]

_AGENT_NAMES = {a["id"]: f"{a['lastName']} {a['firstName']}" for a in SEED_AGENTS}

# (id, tipo, nome, estado, prioridade, budget, discountRate, criado há, áreas, tags, agente)
_SAMPLE_LEADS = [
    ("1", "Buy", "田中 太郎", "New", "High", 50000000, 1.0, timedelta(0), ["渋谷区", "目黒区"], ["初回", "即決"], "agent-sato"),
    ("2", "Sell", "鈴木 一郎", "Sent", "Mid", 35000000, 0.9, DAY, ["世田谷区"], ["投資用"], "agent-suzuki"),
    ("3", "Buy", "佐藤 花子", "Scheduled", "Low", 45000000, 1.0, 2 * DAY, ["港区"], [], "agent-sato"),
    ("4", "Buy", "高橋 健一", "Viewed", "High", 60000000, 1.0, 3 * DAY, ["品川区"], ["ペット可"], "agent-tanaka"),
    ("5", "Sell", "伊藤 美咲", "Negotiating", "High", 80000000, 0.95, 4 * DAY, ["中央区"], ["VIP"], "agent-sato"),
    ("6", "Buy", "渡辺 謙", "Closed", "Mid", 42000000, 1.0, 5 * DAY, ["新宿区"], [], "agent-suzuki"),
    ("7", "Buy", "山本 太郎", "New", "Low", 30000000, 1.0, timedelta(0), ["練馬区"], [], "agent-tanaka"),
    ("8", "Sell", "中村 次郎", "Sent", "Mid", 55000000, 1.0, timedelta(0), ["杉並区"], [], "agent-sato"),
    ("9", "Buy", "小林 三郎", "Scheduled", "High", 70000000, 0.9, timedelta(0), ["世田谷区"], ["急ぎ"], "agent-suzuki"),
    ("10", "Buy", "加藤 四郎", "Negotiating", "Mid", 48000000, 1.0, timedelta(0), ["中野区"], [], "agent-tanaka"),
    ("11", "Buy", "山田 五郎", "New", "High", 90000000, 0.95, timedelta(0), ["渋谷区", "港区"], ["法人", "VIP"], "agent-sato"),
    ("12", "Sell", "佐々木 六郎", "Scheduled", "Low", 28000000, 1.0, timedelta(0), ["足立区"], [], "agent-suzuki"),
]


def _first_lead_extras(now: datetime) -> Dict[str, Any]:
    """O primeiro lead traz contactos, histórico de actividades e imóveis consultados."""
    agent_id = "agent-sato"
    agent_name = _AGENT_NAMES[agent_id]
    return {
        "phone": "090-1234-5678",
        "email": "tanaka@example.com",
        "age": 35,
        "familyStructure": "Family with kids",
        "activities": [
            {
                "id": "a1",
                "type": "Call",
                "timestamp": (now - HOUR).isoformat(),
                "content": "初回ヒアリング実施。予算感とエリアの再確認。来週の土曜日に内見予定。",
                "agentId": agent_id,
                "agentName": agent_name,
            },
            {
                "id": "a2",
                "type": "Email",
                "timestamp": (now - DAY).isoformat(),
                "content": "物件資料A、B、Cを送付しました。開封確認済み。",
                "agentId": agent_id,
                "agentName": agent_name,
            },
            {
                "id": "a3",
                "type": "Note",
                "timestamp": (now - 2 * DAY).isoformat(),
                "content": "奥様の実家が目黒区のため、目黒区中心に探したいとのこと。",
                "agentId": agent_id,
                "agentName": agent_name,
            },
        ],
        "inquiredProperties": [
            {
                "id": "p1",
                "name": "パークコート渋谷ザ・タワー",
                "address": "東京都渋谷区宇田川町",
                "price": 150000000,
                "inquiredAt": (now - 7 * DAY).isoformat(),
            },
            {
                "id": "p2",
                "name": "シティタワー恵比寿",
                "address": "東京都渋谷区恵比寿",
                "price": 120000000,
                "inquiredAt": (now - 14 * DAY).isoformat(),
            },
        ],
    }


def build_seed_leads(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Documentos dos leads de demonstração, com datas relativas a `now`."""
    if now is None:
        now = datetime.now(timezone.utc)

    leads = []
    for (lead_id, lead_type, name, status, priority, budget, discount_rate,
         age, areas, tags, agent_id) in _SAMPLE_LEADS:
        lead = {
            "id": lead_id,
            "leadType": lead_type,
            "name": name,
            "status": status,
            "priority": priority,
            "budget": budget,
            "discountRate": discount_rate,
            "areas": list(areas),
            "stations": [],
            "tags": list(tags),
            "agentId": agent_id,
            "agentName": _AGENT_NAMES[agent_id],
            "activities": [],
            "inquiredProperties": [],
            "createdAt": (now - age).isoformat(),
            "updatedAt": now.isoformat(),
        }
        if lead_id == "1":
            lead.update(_first_lead_extras(now))
        leads.append(lead)
    return leads


def build_seed_operations(now: Optional[datetime] = None) -> List[ReplaceOne]:
    """Uma operação de upsert por lead, para um único bulk_write."""
    return [
        ReplaceOne({"id": lead["id"]}, copy.deepcopy(lead), upsert=True)
        for lead in build_seed_leads(now)
    ]


async def seed_leads(db, now: Optional[datetime] = None) -> int:
    """Grava os leads de demonstração. Retorna o número de leads escritos."""
    operations = build_seed_operations(now)
    result = await db.leads.bulk_write(operations, ordered=False)
    written = result.upserted_count + result.modified_count
    logger.info(f"Seed de leads: {result.upserted_count} criados, {result.modified_count} actualizados")
    return written
