import logging
from typing import Optional, List
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from .models import Participant

logger = logging.getLogger(__name__)


class ParticipantRepository:
    """
    Repositório para operações de persistência de participantes.

    Trabalha sobre uma única sessão; quem cria a sessão é responsável
    por fechá-la.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def create_participant(
        self,
        participant_id: str,
        name: str,
        birth_date: str,
        age: int,
        cpf: str,
        church: str,
        district: str,
        whatsapp: str,
    ) -> Participant:
        """
        Cria um novo participante no banco de dados.

        Levanta IntegrityError se o ID já existir (após rollback).
        """
        logger.debug(
            f"Criando participante: id={participant_id}, name={name}, "
            f"church={church}, district={district}"
        )

        try:
            participant = Participant(
                id=participant_id,
                name=name,
                birth_date=birth_date,
                age=age,
                cpf=cpf,
                church=church,
                district=district,
                whatsapp=whatsapp,
            )
            self._db.add(participant)
            self._db.commit()
            self._db.refresh(participant)

            logger.debug(
                f"Participante criado com sucesso: id={participant.id}"
            )

            return participant
        except IntegrityError as e:
            logger.warning(
                f"Erro de integridade ao criar participante: id={participant_id}, "
                f"error={type(e).__name__}: {e}"
            )
            self._db.rollback()
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"Erro de banco de dados ao criar participante: id={participant_id}, "
                f"error={type(e).__name__}: {e}",
                exc_info=True,
            )
            self._db.rollback()
            raise

    def find_by_id(self, participant_id: str) -> Optional[Participant]:
        """
        Busca participante pelo ID.
        """
        return self._db.get(Participant, participant_id)

    def count_ids_with_prefix(self, prefix: str) -> int:
        """
        Conta participantes cujo ID começa com o prefixo informado.
        """
        pattern = f"{prefix}%"
        count = (
            self._db.query(func.count(Participant.id))
            .filter(Participant.id.like(pattern))
            .scalar()
        )
        return int(count or 0)

    def max_suffix_with_prefix(self, prefix: str) -> int:
        """
        Maior contador numérico entre os IDs "<prefixo><número>".
        Retorna 0 se não houver nenhum.

        Ordena por tamanho antes do texto: "2024-10000" > "2024-9999".
        """
        ids = (
            self._db.query(Participant.id)
            .filter(Participant.id.like(f"{prefix}%"))
            .order_by(func.length(Participant.id).desc(), Participant.id.desc())
            .all()
        )
        for (participant_id,) in ids:
            suffix = participant_id[len(prefix):]
            if suffix.isdigit():
                return int(suffix)
        return 0

    def list_participants(
        self,
        name: Optional[str] = None,
        participant_id: Optional[str] = None,
        cpf: Optional[str] = None,
    ) -> List[Participant]:
        """
        Lista participantes aplicando os filtros informados (AND).

        name: busca por trecho do nome (LIKE %name%)
        participant_id, cpf: igualdade exata
        """
        query = self._db.query(Participant)
        if name:
            query = query.filter(Participant.name.contains(name, autoescape=True))
        if participant_id:
            query = query.filter(Participant.id == participant_id)
        if cpf:
            query = query.filter(Participant.cpf == cpf)
        return query.all()

    def update_participant(
        self,
        participant_id: str,
        name: str,
        birth_date: str,
        age: int,
        cpf: str,
        church: str,
        district: str,
        whatsapp: str,
    ) -> int:
        """
        Substitui os campos do participante. Retorna o número de linhas afetadas.
        """
        try:
            affected = (
                self._db.query(Participant)
                .filter(Participant.id == participant_id)
                .update(
                    {
                        Participant.name: name,
                        Participant.birth_date: birth_date,
                        Participant.age: age,
                        Participant.cpf: cpf,
                        Participant.church: church,
                        Participant.district: district,
                        Participant.whatsapp: whatsapp,
                    },
                    synchronize_session=False,
                )
            )
            self._db.commit()
            return affected
        except SQLAlchemyError as e:
            logger.error(
                f"Erro de banco de dados ao editar participante: id={participant_id}, "
                f"error={type(e).__name__}: {e}",
                exc_info=True,
            )
            self._db.rollback()
            raise

    def delete_participant(self, participant_id: str) -> int:
        """
        Remove o participante. Retorna o número de linhas afetadas.
        """
        try:
            affected = (
                self._db.query(Participant)
                .filter(Participant.id == participant_id)
                .delete(synchronize_session=False)
            )
            self._db.commit()
            return affected
        except SQLAlchemyError as e:
            logger.error(
                f"Erro de banco de dados ao excluir participante: id={participant_id}, "
                f"error={type(e).__name__}: {e}",
                exc_info=True,
            )
            self._db.rollback()
            raise
