"""
====================================================================
ÍNDICES DE BASE DE DADOS
====================================================================
Índices das colecções consultadas pela aplicação.
Criados no arranque; um índice já existente é ignorado.
====================================================================
"""
import logging

logger = logging.getLogger(__name__)


INDEXES = {
    "leads": [
        # Identificador de domínio (o _id do Mongo nunca é exposto)
        {"keys": [("id", 1)], "name": "idx_lead_id", "unique": True},
        {"keys": [("status", 1)], "name": "idx_lead_status"},
        {"keys": [("agentId", 1)], "name": "idx_lead_agent"},
        {"keys": [("tags", 1)], "name": "idx_lead_tags"},
        # Dashboard: fechados por data de actualização
        {"keys": [("status", 1), ("updatedAt", -1)], "name": "idx_status_updated"},
    ],
    "properties": [
        {"keys": [("id", 1)], "name": "idx_property_id", "unique": True},
        {"keys": [("deleted", 1)], "name": "idx_property_deleted", "sparse": True},
    ],
    "users": [
        # Login
        {"keys": [("email", 1)], "name": "idx_email", "unique": True},
        {"keys": [("id", 1)], "name": "idx_user_id", "unique": True},
    ],
    "system_error_logs": [
        {"keys": [("timestamp", -1)], "name": "idx_timestamp_desc"},
        {"keys": [("component", 1)], "name": "idx_component"},
        {"keys": [("resolved", 1)], "name": "idx_resolved"},
    ],
}


async def create_indexes(db) -> dict:
    """
    Cria os índices de todas as colecções.

    Returns:
        dict: Resumo dos índices criados, existentes e com erro
    """
    results = {"created": [], "errors": [], "skipped": []}

    for collection_name, indexes in INDEXES.items():
        collection = getattr(db, collection_name)
        for idx in indexes:
            label = f"{collection_name}.{idx['name']}"
            try:
                await collection.create_index(
                    idx["keys"],
                    name=idx["name"],
                    unique=idx.get("unique", False),
                    sparse=idx.get("sparse", False),
                )
                results["created"].append(label)
                logger.debug(f"Índice criado: {label}")
            except Exception as e:
                if "already exists" in str(e).lower():
                    results["skipped"].append(label)
                else:
                    results["errors"].append(f"{label}: {str(e)}")
                    logger.error(f"Erro ao criar índice {label}: {e}")

    logger.info(
        f"Criação de índices concluída: "
        f"{len(results['created'])} criados, "
        f"{len(results['skipped'])} já existiam, "
        f"{len(results['errors'])} erros"
    )
    return results
