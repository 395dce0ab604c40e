"""
Vista efectiva de imóveis: catálogo seed sobreposto pelos documentos da BD.

Regras:
- seed sem documento na BD -> aparece tal como está
- seed com documento na BD -> aparece o documento (override), excepto se deleted
- documento com id fora do seed -> aparece, excepto se deleted
Resultado ordenado por updatedAt (ou createdAt) descendente.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from models.common import parse_timestamp


def _index_by_id(items: Iterable[Mapping[str, Any]]) -> Dict[str, Mapping[str, Any]]:
    """Mapa ordenado id -> documento (o último com o mesmo id ganha)."""
    indexed: Dict[str, Mapping[str, Any]] = {}
    for item in items:
        indexed[item["id"]] = item
    return indexed


def sort_timestamp(prop: Mapping[str, Any]):
    return parse_timestamp(prop.get("updatedAt") or prop.get("createdAt"))


def merge_properties(
    seed: Iterable[Mapping[str, Any]],
    live: Iterable[Mapping[str, Any]]
) -> List[Dict[str, Any]]:
    """Lista efectiva de imóveis (seed + overrides + criações, sem apagados)."""
    seed_map = _index_by_id(seed)
    live_map = _index_by_id(live)

    effective: List[Dict[str, Any]] = []

    for prop_id, seed_prop in seed_map.items():
        override = live_map.get(prop_id)
        if override is None:
            effective.append(dict(seed_prop))
        elif not override.get("deleted"):
            effective.append(dict(override))

    for prop_id, live_prop in live_map.items():
        if prop_id not in seed_map and not live_prop.get("deleted"):
            effective.append(dict(live_prop))

    return sorted(effective, key=sort_timestamp, reverse=True)


def find_effective_property(
    prop_id: str,
    seed: Iterable[Mapping[str, Any]],
    live_doc: Optional[Mapping[str, Any]]
) -> Optional[Dict[str, Any]]:
    """Um único imóvel efectivo; None se não existe ou está apagado."""
    if live_doc is not None:
        if live_doc.get("deleted"):
            return None
        return dict(live_doc)
    seed_prop = _index_by_id(seed).get(prop_id)
    return dict(seed_prop) if seed_prop else None


def search_properties(properties: Iterable[Mapping[str, Any]], query: Optional[str]) -> List[Mapping[str, Any]]:
    """Filtro por nome ou morada (substring)."""
    if not query:
        return list(properties)
    return [
        p for p in properties
        if query in (p.get("name") or "") or query in (p.get("address") or "")
    ]
