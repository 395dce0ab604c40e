"""
====================================================================
SERVIÇO KANBAN DE LEADS
====================================================================
Lógica de visualização e movimentação no quadro Kanban.
O mesmo mecanismo serve dois quadros: por estado e por prioridade.

Um gesto de drag & drop termina sobre uma coluna ou sobre outro card:
  1. se o alvo é um id de coluna do modo activo, é esse o grupo;
  2. senão, usa-se o grupo (estado/prioridade) do card alvo.
Se o grupo muda, o estado local é actualizado de imediato (optimista)
e só depois é feita a escrita na BD de um único campo.
====================================================================
"""
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from database import db
from models.lead import PRIORITY_COLUMNS, LeadPriority, LeadStatus
from services.realtime import LEADS_CHANNEL, broker
from services.status_config import get_status_color, get_status_label, sorted_config
from services.system_error_logger import system_error_logger

logger = logging.getLogger(__name__)

GROUP_BY_STATUS = "status"
GROUP_BY_PRIORITY = "priority"
GROUP_MODES = (GROUP_BY_STATUS, GROUP_BY_PRIORITY)

# Escrita durável: (lead_id, campos) -> None; levanta excepção em caso de falha
LeadWriter = Callable[[str, Dict[str, Any]], Awaitable[None]]


# ==== CONFIGURAÇÃO DO KANBAN ====

def get_kanban_columns(group_by: str, status_config: List[dict]) -> List[dict]:
    """Colunas do modo activo (estados pela `order` configurada)."""
    if group_by == GROUP_BY_PRIORITY:
        return copy.deepcopy(PRIORITY_COLUMNS)
    return sorted_config(copy.deepcopy(status_config))


def default_group(group_by: str) -> str:
    return LeadPriority.MID.value if group_by == GROUP_BY_PRIORITY else LeadStatus.NEW.value


def group_value(lead: dict, group_by: str) -> Optional[str]:
    return lead.get(group_by)


def resolve_target_group(
    over_id: Optional[str],
    group_by: str,
    columns: List[dict],
    leads: List[dict]
) -> Optional[str]:
    """
    Determina o grupo de destino de um drop.
    Retorna None se o alvo não for reconhecido.
    """
    if not over_id:
        return None

    if any(column["id"] == over_id for column in columns):
        return over_id

    # Largado sobre outro card: usa o grupo desse card
    over_lead = next((lead for lead in leads if lead.get("id") == over_id), None)
    if over_lead:
        return group_value(over_lead, group_by)
    return None


# ==== DADOS PARA O QUADRO KANBAN ====

def build_board(leads: List[dict], group_by: str, status_config: List[dict]) -> dict:
    """
    Organiza os leads por coluna.
    Leads com um estado que já não está configurado ficam numa coluna com o id em bruto,
    no fim do quadro.
    """
    columns = get_kanban_columns(group_by, status_config)
    by_group: Dict[str, List[dict]] = {column["id"]: [] for column in columns}
    orphan_groups: Dict[str, List[dict]] = {}

    for lead in leads:
        group = group_value(lead, group_by) or default_group(group_by)
        if group in by_group:
            by_group[group].append(lead)
        else:
            orphan_groups.setdefault(group, []).append(lead)

    board_columns = [
        {
            **column,
            "label": get_status_label(columns, column["id"]),
            "color": get_status_color(columns, column["id"]),
            "leads": by_group[column["id"]],
        }
        for column in columns
    ]
    next_order = len(board_columns) + 1
    for group, group_leads in orphan_groups.items():
        board_columns.append({
            "id": group,
            "label": get_status_label(columns, group),
            "color": get_status_color(columns, group),
            "order": next_order,
            "leads": group_leads,
        })
        next_order += 1

    return {
        "groupBy": group_by,
        "columns": board_columns,
        "totalCount": len(leads),
    }


# ==== MOVIMENTAÇÃO NO KANBAN ====

async def write_lead_fields(lead_id: str, fields: Dict[str, Any]):
    """Escrita durável de um campo de grupo + updatedAt."""
    result = await db.leads.update_one({"id": lead_id}, {"$set": fields})
    if result.matched_count == 0:
        raise LookupError(f"Lead {lead_id} não encontrado")
    await broker.publish_document(LEADS_CHANNEL, lead_id)


class KanbanBoard:
    """
    Estado local de um quadro Kanban.

    move() aplica a alteração de forma optimista e depois escreve na BD.
    Se a escrita falhar, o erro é registado e, com rollback_on_failure=True,
    o lead volta ao estado anterior; com False o estado local mantém-se
    (fire-and-forget, sem reconciliação).
    """

    def __init__(
        self,
        leads: List[dict],
        group_by: str,
        status_config: List[dict],
        writer: LeadWriter = write_lead_fields,
        rollback_on_failure: bool = True
    ):
        if group_by not in GROUP_MODES:
            raise ValueError(f"Modo de agrupamento inválido: {group_by}")
        self.leads = [dict(lead) for lead in leads]
        self.group_by = group_by
        self.columns = get_kanban_columns(group_by, status_config)
        self._status_config = status_config
        self._writer = writer
        self.rollback_on_failure = rollback_on_failure

    def find(self, lead_id: str) -> Optional[dict]:
        return next((lead for lead in self.leads if lead.get("id") == lead_id), None)

    def snapshot(self) -> dict:
        return build_board(self.leads, self.group_by, self._status_config)

    async def move(self, active_id: str, over_id: Optional[str]) -> Tuple[bool, dict, str]:
        """
        Move um lead para o grupo resolvido a partir do alvo do drop.

        Returns:
            Tuple com (mudou, dados, mensagem). Um drop sem alvo ou no próprio grupo
            não altera nada.
        """
        field = self.group_by
        active_lead = self.find(active_id)
        if not active_lead:
            return False, {}, "Lead não encontrado no quadro"

        new_group = resolve_target_group(over_id, self.group_by, self.columns, self.leads)
        if new_group is None:
            return False, {}, "Sem alvo válido"

        old_group = group_value(active_lead, field)
        if old_group == new_group:
            return False, {field: old_group}, "Lead já está nesta coluna"

        previous = {field: old_group, "updatedAt": active_lead.get("updatedAt")}
        fields = {field: new_group, "updatedAt": datetime.now(timezone.utc).isoformat()}

        # Actualização optimista
        active_lead.update(fields)

        data = {
            "id": active_id,
            "field": field,
            "oldValue": old_group,
            "newValue": new_group,
            "updatedAt": fields["updatedAt"],
            "persisted": True,
            "rolledBack": False,
        }

        try:
            await self._writer(active_id, fields)
            logger.info(f"{field} do lead {active_id} alterado de '{old_group}' para '{new_group}'")
        except Exception as e:
            logger.error(f"Falha ao gravar {field} do lead {active_id}: {e}")
            await system_error_logger.log_error(
                error_type="kanban_write_error",
                message=f"Falha ao mover lead {active_id} para '{new_group}'",
                component="kanban",
                details={"lead_id": active_id, "field": field, "error": str(e)},
                severity="error",
            )
            data["persisted"] = False
            if self.rollback_on_failure:
                active_lead.update(previous)
                data["rolledBack"] = True
                data["updatedAt"] = previous["updatedAt"]
            return True, data, "Erro ao gravar a alteração"

        return True, data, f"Lead movido de '{old_group}' para '{new_group}'"
