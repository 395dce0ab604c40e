"""
====================================================================
SYSTEM ERROR LOGGER
====================================================================
Registo de falhas de leitura/escrita na BD (colecção system_error_logs)
para o administrador. Não há retry automático: o erro fica registado,
o estado anterior mantém-se e o utilizador pode repetir a acção.
====================================================================
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

SEVERITIES = ("info", "warning", "error", "critical")


class SystemErrorLogger:
    """Registo centralizado de falhas de persistência."""

    def __init__(self):
        self._db = None

    async def _get_db(self):
        if self._db is None:
            from database import db
            self._db = db
        return self._db

    async def log_error(
        self,
        error_type: str,
        message: str,
        component: str = "general",
        details: Dict[str, Any] = None,
        severity: str = "warning",
        user_id: str = None
    ) -> str:
        """
        Grava uma entrada no registo de erros.

        Args:
            error_type: kanban_write_error, db_write_error, seed_error, ...
            component: leads, properties, kanban, activities, dev, ...
            severity: info, warning, error ou critical

        Returns:
            ID da entrada ("" se nem o registo foi possível)
        """
        if severity not in SEVERITIES:
            severity = "error"

        db = await self._get_db()
        error_id = str(uuid.uuid4())

        entry = {
            "id": error_id,
            "type": error_type,
            "message": message,
            "component": component,
            "details": details or {},
            "severity": severity,
            "userId": user_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "resolved": False,
            "resolvedAt": None,
            "resolvedBy": None,
        }

        try:
            await db.system_error_logs.insert_one(entry)
        except Exception as e:
            # A BD pode estar indisponível; fica só no log da aplicação
            logger.error(f"Não foi possível registar erro {component}/{error_type}: {e}")
            return ""
        return error_id

    async def log_write_failure(
        self,
        component: str,
        action: str,
        document_id: Optional[str],
        error: Exception,
        user_id: Optional[str] = None
    ) -> str:
        """Falha de escrita de um documento (criar, actualizar, remover...)."""
        logger.error(f"Erro ao {action} {component}/{document_id}: {error}")
        return await self.log_error(
            error_type="db_write_error",
            message=f"Falha ao {action} documento em {component}",
            component=component,
            details={"documentId": document_id, "action": action, "error": str(error)},
            severity="error",
            user_id=user_id,
        )

    async def get_errors(
        self,
        page: int = 1,
        limit: int = 50,
        component: str = None,
        resolved: bool = None
    ) -> Dict[str, Any]:
        """Lista paginada, mais recentes primeiro."""
        db = await self._get_db()

        query = {}
        if component:
            query["component"] = component
        if resolved is not None:
            query["resolved"] = resolved

        total = await db.system_error_logs.count_documents(query)
        unresolved = await db.system_error_logs.count_documents({"resolved": False})

        cursor = db.system_error_logs.find(query, {"_id": 0}).sort("timestamp", -1)
        errors = await cursor.skip((page - 1) * limit).limit(limit).to_list(limit)

        return {
            "errors": errors,
            "total": total,
            "unresolved": unresolved,
            "page": page,
            "pages": (total + limit - 1) // limit,
        }

    async def mark_as_resolved(self, error_id: str, resolved_by: str) -> bool:
        db = await self._get_db()
        result = await db.system_error_logs.update_one(
            {"id": error_id, "resolved": False},
            {"$set": {
                "resolved": True,
                "resolvedAt": datetime.now(timezone.utc).isoformat(),
                "resolvedBy": resolved_by,
            }}
        )
        return result.modified_count > 0


system_error_logger = SystemErrorLogger()
