#!/usr/bin/env python3
"""
==============================================
SEED DATABASE - CRM Imobiliário
==============================================
Script para criar os utilizadores iniciais (admin + agentes de
demonstração) e, opcionalmente, os leads de exemplo.

Uso:
    cd /app/backend
    python seed.py
    python seed.py --with-leads

ATENÇÃO: Altere as passwords padrão antes de usar em produção!
==============================================
"""

import argparse
import asyncio
import os
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorClient

from models.auth import UserRole, display_name
from services.auth import hash_password
from services.seed_data import SEED_AGENTS, seed_leads


DEFAULT_AGENT_PASSWORD = os.environ.get("SEED_AGENT_PASSWORD", "agent2026")

ADMIN_USER = {
    "id": "admin",
    "email": os.environ.get("SEED_ADMIN_EMAIL", "admin@example.com"),
    "password": os.environ.get("SEED_ADMIN_PASSWORD", "admin2026"),
    "lastName": "管理",
    "firstName": "者",
    "role": UserRole.ADMIN,
}


def _user_documents():
    users = [ADMIN_USER] + [
        {**agent, "password": DEFAULT_AGENT_PASSWORD, "role": UserRole.AGENT}
        for agent in SEED_AGENTS
    ]
    now = datetime.now(timezone.utc).isoformat()
    return [
        {
            "id": user["id"],
            "email": user["email"],
            "password": hash_password(user["password"]),
            "lastName": user["lastName"],
            "firstName": user["firstName"],
            "name": display_name(user["lastName"], user["firstName"]),
            "avatarUrl": None,
            "role": user["role"],
            "isActive": True,
            "createdAt": now,
        }
        for user in users
    ]


async def seed_users(db):
    """Criar utilizadores iniciais no sistema (ignora emails existentes)."""
    created_count = 0
    skipped_count = 0

    for user_doc in _user_documents():
        existing = await db.users.find_one({"email": user_doc["email"]})
        if existing:
            print(f"  [SKIP] {user_doc['name']} ({user_doc['email']}) - já existe")
            skipped_count += 1
            continue

        await db.users.insert_one(user_doc)
        print(f"  [OK] {user_doc['name']} ({user_doc['role']}) - {user_doc['email']}")
        created_count += 1

    print()
    print("-" * 50)
    print(f"Utilizadores criados: {created_count}")
    print(f"Utilizadores ignorados (já existiam): {skipped_count}")
    print("-" * 50)


async def main(with_leads: bool):
    mongo_url = os.environ.get("MONGO_URL", "mongodb://localhost:27017")
    db_name = os.environ.get("DB_NAME", "crm")

    client = AsyncIOMotorClient(mongo_url)
    db = client[db_name]

    print("=" * 50)
    print("CRM Imobiliário - Seed")
    print("=" * 50)
    print(f"MongoDB: {mongo_url}")
    print(f"Database: {db_name}")
    print()

    try:
        await seed_users(db)
        if with_leads:
            written = await seed_leads(db)
            print(f"\nLeads de demonstração gravados: {written}")
    finally:
        client.close()

    print()
    print("IMPORTANTE: Altere as passwords padrão em produção!")
    print("=" * 50)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed inicial do CRM")
    parser.add_argument("--with-leads", action="store_true", help="grava também os leads de exemplo")
    args = parser.parse_args()
    asyncio.run(main(args.with_leads))
