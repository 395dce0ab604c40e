"""
Catálogo seed de imóveis (incluído no código, nunca gravado na BD).
Aparece sempre, excepto quando um documento na BD com o mesmo id o substitui ou apaga.
"""
import copy
from typing import Any, Dict, List

SEED_PROPERTIES: List[Dict[str, Any]] = [
    {
        "id": "p1",
        "name": "パークコート渋谷ザ・タワー",
        "address": "東京都渋谷区宇田川町",
        "price": 150000000,
        "layout": "2LDK",
        "size": 72.5,
        "builtYear": 2017,
        "status": "active",
        "images": [],
        "memo": "眺望良好。ペット可。",
        "location": {"lat": 35.6617, "lng": 139.6983},
        "createdAt": "2025-01-10T09:00:00+09:00",
        "updatedAt": "2025-01-10T09:00:00+09:00",
    },
    {
        "id": "p2",
        "name": "シティタワー恵比寿",
        "address": "東京都渋谷区恵比寿",
        "price": 120000000,
        "layout": "3LDK",
        "size": 80.2,
        "builtYear": 2014,
        "status": "negotiating",
        "images": [],
        "location": {"lat": 35.6467, "lng": 139.7101},
        "createdAt": "2025-01-12T09:00:00+09:00",
        "updatedAt": "2025-01-12T09:00:00+09:00",
    },
    {
        "id": "p3",
        "name": "ブリリアタワー目黒",
        "address": "東京都品川区上大崎",
        "price": 98000000,
        "layout": "2LDK",
        "size": 61.0,
        "builtYear": 2018,
        "status": "active",
        "images": [],
        "location": {"lat": 35.6336, "lng": 139.7155},
        "createdAt": "2025-01-15T09:00:00+09:00",
        "updatedAt": "2025-01-15T09:00:00+09:00",
    },
    {
        "id": "p4",
        "name": "プラウド世田谷桜丘",
        "address": "東京都世田谷区桜丘",
        "price": 68000000,
        "layout": "3LDK",
        "size": 75.4,
        "builtYear": 2009,
        "status": "sold",
        "images": [],
        "memo": "成約済。類似物件の問い合わせ多数。",
        "createdAt": "2024-11-02T09:00:00+09:00",
        "updatedAt": "2024-12-20T09:00:00+09:00",
    },
    {
        "id": "p5",
        "name": "ザ・パークハウス中野",
        "address": "東京都中野区中野",
        "price": 54000000,
        "layout": "1LDK",
        "size": 45.8,
        "builtYear": 2012,
        "status": "active",
        "images": [],
        "createdAt": "2025-02-01T09:00:00+09:00",
        "updatedAt": "2025-02-01T09:00:00+09:00",
    },
]

SEED_PROPERTY_IDS = frozenset(p["id"] for p in SEED_PROPERTIES)


def get_seed_properties() -> List[Dict[str, Any]]:
    """Cópia do catálogo (o constante nunca é alterado)."""
    return copy.deepcopy(SEED_PROPERTIES)


def get_seed_property(prop_id: str):
    for prop in SEED_PROPERTIES:
        if prop["id"] == prop_id:
            return copy.deepcopy(prop)
    return None
