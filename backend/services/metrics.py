"""
====================================================================
AGREGADOR DE MÉTRICAS DO DASHBOARD
====================================================================
Recebe a colecção completa de leads e os objectivos do ano corrente
e calcula os KPIs do dashboard, o pipeline por agente e os últimos
negócios fechados.

A agregação é feita em memória sobre o snapshot dos leads, a cada
pedido (ou a cada mudança notificada pelo broker em tempo real).
====================================================================
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from models.common import parse_timestamp
from models.lead import LEAD_STATUSES, PIPELINE_STATUSES, LeadStatus
from services.revenue import estimated_revenue

logger = logging.getLogger(__name__)

PIPELINE_MODES = ("amount", "count")
UNKNOWN_AGENT = "Unknown"
RECENT_WINS_LIMIT = 5


def _updated_at(lead: Mapping[str, Any], tz) -> Optional[datetime]:
    """updatedAt no fuso horário de negócio; None se ausente ou inválido."""
    raw = lead.get("updatedAt")
    if not raw:
        return None
    try:
        return parse_timestamp(raw).astimezone(tz)
    except (ValueError, TypeError):
        logger.warning(f"updatedAt inválido no lead {lead.get('id')}: {raw!r}")
        return None


def previous_month(year: int, month: int) -> tuple:
    """Mês anterior (Janeiro -> Dezembro do ano anterior)."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def calculate_metrics(
    leads: Iterable[Mapping[str, Any]],
    targets: Optional[Mapping[str, float]],
    now: Optional[datetime] = None
) -> Dict[str, float]:
    """
    Calcula os KPIs do dashboard.

    Args:
        leads: Todos os leads (documentos)
        targets: Objectivos do ano corrente, mês ("1".."12") -> valor
        now: Momento de referência (aware). O fuso define os limites do mês.

    Returns:
        Dict com currentMonthTarget, currentMonthRevenue, achievementRate, momRevenue,
        currentMonthForecast, currentMonthClosed, currentMonthExpected,
        yearTotalRevenue e yearTotalTarget
    """
    if now is None:
        now = datetime.now(timezone.utc)
    tz = now.tzinfo or timezone.utc
    targets = targets or {}

    current_year, current_month = now.year, now.month
    last_month_year, last_month = previous_month(current_year, current_month)

    current_month_target = targets.get(str(current_month)) or 0
    year_total_target = sum(v or 0 for v in targets.values())

    current_month_revenue = 0
    current_month_expected = 0
    year_total_revenue = 0
    last_month_revenue = 0

    for lead in leads:
        value = estimated_revenue(lead)
        status = lead.get("status")

        if status == LeadStatus.CLOSED.value:
            updated = _updated_at(lead, tz)
            if updated is not None:
                if updated.year == current_year:
                    year_total_revenue += value
                    if updated.month == current_month:
                        current_month_revenue += value
                if updated.year == last_month_year and updated.month == last_month:
                    last_month_revenue += value

        # Pipeline activo inteiro, independente da data
        if status in PIPELINE_STATUSES:
            current_month_expected += value

    achievement_rate = (
        current_month_revenue / current_month_target * 100
        if current_month_target > 0 else 0
    )

    if last_month_revenue > 0:
        mom_revenue = (current_month_revenue - last_month_revenue) / last_month_revenue * 100
    elif current_month_revenue > 0:
        mom_revenue = 100
    else:
        mom_revenue = 0

    return {
        "currentMonthTarget": current_month_target,
        "currentMonthRevenue": current_month_revenue,
        "achievementRate": achievement_rate,
        "momRevenue": mom_revenue,
        "currentMonthForecast": current_month_revenue + current_month_expected,
        "currentMonthClosed": current_month_revenue,
        "currentMonthExpected": current_month_expected,
        "yearTotalRevenue": year_total_revenue,
        "yearTotalTarget": year_total_target,
    }


def calculate_pipeline_data(
    leads: Iterable[Mapping[str, Any]],
    mode: str = "amount"
) -> List[Dict[str, Any]]:
    """
    Pipeline por agente: contagem ou soma de receita por estado.

    Só os ids canónicos são agregados; leads com um estado fora desse conjunto
    são ignorados. Agentes pela ordem em que aparecem.
    """
    if mode not in PIPELINE_MODES:
        raise ValueError(f"Modo inválido: {mode}")

    agent_map: Dict[str, Dict[str, Any]] = {}

    for lead in leads:
        agent = lead.get("agentName") or UNKNOWN_AGENT
        if agent not in agent_map:
            agent_map[agent] = {"name": agent, **{status: 0 for status in LEAD_STATUSES}}

        status = lead.get("status")
        if status in LEAD_STATUSES:
            agent_map[agent][status] += estimated_revenue(lead) if mode == "amount" else 1

    return list(agent_map.values())


def get_recent_wins(
    leads: Iterable[Mapping[str, Any]],
    limit: int = RECENT_WINS_LIMIT
) -> List[Mapping[str, Any]]:
    """Últimos negócios fechados, por updatedAt desc (sort estável)."""
    closed = [lead for lead in leads if lead.get("status") == LeadStatus.CLOSED.value]

    def sort_key(lead):
        try:
            return parse_timestamp(lead.get("updatedAt"))
        except (ValueError, TypeError):
            return parse_timestamp(None)

    return sorted(closed, key=sort_key, reverse=True)[:limit]
