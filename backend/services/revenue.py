"""
Fórmula de receita estimada (comissão) de um lead.

    receita = budget * 0.03 * discountRate + 60000

Função pura, sem arredondamento nem limites - quem chama garante um discountRate razoável.
Os arredondamentos de apresentação (yen inteiro, "man-yen") ficam para o cliente.
"""
from typing import Any, Mapping

COMMISSION_RATE = 0.03
FIXED_FEE = 60000
DEFAULT_DISCOUNT_RATE = 1.0


def estimated_revenue(lead: Mapping[str, Any]) -> float:
    """Receita estimada de um lead (documento com budget/discountRate)."""
    budget = lead.get("budget") or 0
    discount_rate = lead.get("discountRate")
    if discount_rate is None:
        discount_rate = DEFAULT_DISCOUNT_RATE
    return budget * COMMISSION_RATE * discount_rate + FIXED_FEE
