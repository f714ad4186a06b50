from sqlalchemy import Column, Integer, String
from .database import Base


class Participant(Base):
    """
    Modelo de participante inscrito.

    O ID é atribuído pelo serviço (sequencial por ano ou UUID),
    nunca pelo banco.
    """
    __tablename__ = "participants"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    birth_date = Column("birthDate", String(40), nullable=False)
    age = Column(Integer, nullable=True)
    cpf = Column(String(20), nullable=False, index=True)
    church = Column(String(200), nullable=False)
    district = Column(String(200), nullable=False)
    whatsapp = Column(String(50), nullable=False)

    def to_dict(self) -> dict:
        """Representação pública (chaves no formato do JSON da API)."""
        return {
            "id": self.id,
            "name": self.name,
            "birthDate": self.birth_date,
            "age": self.age,
            "cpf": self.cpf,
            "church": self.church,
            "district": self.district,
            "whatsapp": self.whatsapp,
        }
