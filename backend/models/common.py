"""
Base comum dos modelos.
Os documentos na BD usam camelCase (leadType, updatedAt...), os atributos Python snake_case.
"""
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Modelo que aceita e serializa com nomes camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_document(self, exclude_unset: bool = False) -> dict:
        """Dict pronto para gravar na BD (chaves camelCase)."""
        return self.model_dump(by_alias=True, exclude_unset=exclude_unset, mode="json")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value) -> datetime:
    """
    Converte datetime ou string ISO para datetime.
    Strings terminadas em 'Z' são aceites. Valores vazios devolvem datetime.min (UTC).
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value:
        return datetime.min.replace(tzinfo=timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def reject_null(v):
    """Campos obrigatórios podem ser omitidos numa edição, nunca enviados como null."""
    if v is None:
        raise ValueError("Este campo não pode ser null")
    return v


def timestamp_to_iso(value: datetime) -> str:
    """ISO-8601 de um datetime recebido; sem fuso horário conta como UTC."""
    return parse_timestamp(value).isoformat()
