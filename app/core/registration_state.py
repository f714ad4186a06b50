from dataclasses import dataclass, fields
from typing import Optional, List

from .normalizers import clean_text

# Nome do campo no dataclass → nome do campo no JSON da API
FIELD_LABELS = {
    "name": "name",
    "birth_date": "birthDate",
    "cpf": "cpf",
    "church": "church",
    "district": "district",
    "whatsapp": "whatsapp",
}


@dataclass
class ParticipantData:
    """
    Dados de negócio enviados pelo cliente na inscrição ou edição.
    """
    name: Optional[str] = None
    birth_date: Optional[str] = None
    cpf: Optional[str] = None
    church: Optional[str] = None
    district: Optional[str] = None
    whatsapp: Optional[str] = None

    def cleaned(self) -> "ParticipantData":
        """Cópia com espaços removidos e vazios convertidos em None."""
        return ParticipantData(
            **{f.name: clean_text(getattr(self, f.name)) for f in fields(self)}
        )

    def missing_fields(self) -> List[str]:
        """Campos obrigatórios ausentes (nomes no formato da API)."""
        return [
            FIELD_LABELS[f.name]
            for f in fields(self)
            if clean_text(getattr(self, f.name)) is None
        ]
