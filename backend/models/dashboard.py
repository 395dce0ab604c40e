"""
Modelos do dashboard (KPIs, pipeline por agente, objectivos)
"""
from typing import Dict

from pydantic import Field, field_validator

from models.common import CamelModel


class DashboardMetrics(CamelModel):
    # Cartão 1: objectivo mensal
    current_month_target: float
    current_month_revenue: float
    achievement_rate: float
    mom_revenue: float

    # Cartão 2: previsão do mês (fechados + pipeline)
    current_month_forecast: float
    current_month_closed: float
    current_month_expected: float

    # Cartão 3: totais do ano
    year_total_revenue: float
    year_total_target: float


class PipelineDataPoint(CamelModel):
    """Uma barra empilhada por agente, um segmento por estado canónico"""
    name: str
    new: float = Field(default=0, alias="New")
    sent: float = Field(default=0, alias="Sent")
    scheduled: float = Field(default=0, alias="Scheduled")
    viewed: float = Field(default=0, alias="Viewed")
    negotiating: float = Field(default=0, alias="Negotiating")
    closed: float = Field(default=0, alias="Closed")


class YearTargets(CamelModel):
    """Objectivos de um ano: mês ("1".."12") -> valor"""
    targets: Dict[str, float] = {}

    @field_validator("targets")
    @classmethod
    def validate_months(cls, v: Dict[str, float]) -> Dict[str, float]:
        for month, amount in v.items():
            if month not in {str(m) for m in range(1, 13)}:
                raise ValueError(f"Mês inválido: {month}")
            if amount < 0:
                raise ValueError(f"Objectivo negativo para o mês {month}")
        return v
