"""
Funções para normalizar e validar dados de entrada do participante.
"""
from datetime import date, datetime
from typing import Optional

from .errors import ValidationError


def clean_text(raw: Optional[str]) -> Optional[str]:
    """
    Remove espaços das pontas. Retorna None se o valor ficar vazio.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


def parse_birth_date(raw: str) -> date:
    """
    Converte a data de nascimento (ISO) em date.

    Aceita formatos como:
    - "2000-06-15"
    - "2000-06-15T00:00:00"
    - "2000-06-15T00:00:00Z"

    Levanta ValidationError se a data não puder ser interpretada.
    """
    text = (raw or "").strip()
    if not text:
        raise ValidationError("Data de nascimento inválida.")

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    # "Z" no final não é aceito por fromisoformat em versões antigas
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError("Data de nascimento inválida.") from None


def calculate_age(birth: date, today: date) -> int:
    """
    Calcula a idade em anos completos na data `today`.

    Exemplos:
        (2000-06-15, 2024-06-15) → 24
        (2000-06-15, 2024-06-14) → 23
    """
    age = today.year - birth.year
    # Aniversário ainda não aconteceu neste ano
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age
