import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional
from urllib.parse import urlencode

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import EncodingError, NotFoundError, PersistenceError, ValidationError
from .normalizers import calculate_age, parse_birth_date
from .registration_state import ParticipantData
from ..storage.repository import ParticipantRepository

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Participante não encontrado."


@dataclass
class RegistrationResult:
    """
    Resultado da inscrição: registro salvo + QR Code (data URL).
    """
    participant: dict
    qr_code: str


class ParticipantRegistry:
    """
    Regras do cadastro de participantes.

    Valida os dados, calcula a idade, atribui o ID e executa
    as operações de leitura, edição e exclusão. Cada operação
    abre a própria sessão a partir da factory injetada.
    """

    def __init__(
        self,
        db_session_factory: sessionmaker,
        encoder,
        id_policy,
        confirmation_url_base: str,
        max_id_attempts: int = 5,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if max_id_attempts < 1:
            raise ValueError("max_id_attempts deve ser maior ou igual a 1")
        self._db_session_factory = db_session_factory
        self._encoder = encoder
        self._id_policy = id_policy
        self._confirmation_url_base = confirmation_url_base
        self._max_id_attempts = max_id_attempts
        self._clock = clock

    def _validated(self, data: ParticipantData) -> ParticipantData:
        """Checa presença dos seis campos e retorna a versão limpa."""
        missing = data.missing_fields()
        if missing:
            logger.warning(f"Campos obrigatórios ausentes: {', '.join(missing)}")
            raise ValidationError("Todos os campos são obrigatórios.")
        return data.cleaned()

    def ping(self) -> None:
        """Executa um SELECT 1 no banco (health check)."""
        db_session: Session = self._db_session_factory()
        try:
            db_session.execute(text("SELECT 1"))
        finally:
            db_session.close()

    def confirmation_url(self, participant_id: str) -> str:
        return f"{self._confirmation_url_base}?{urlencode({'id': participant_id})}"

    def register(self, data: ParticipantData, accept_terms: bool) -> RegistrationResult:
        """
        Cadastra um participante e gera o QR Code com os dados do registro.

        Se o QR Code falhar depois do insert, o registro continua salvo
        e EncodingError é levantado; o cliente pode buscar o QR depois
        por get_qr_by_id.
        """
        if accept_terms is not True:
            logger.warning("Inscrição recusada: termos de uso não aceitos")
            raise ValidationError("Você deve aceitar os termos de uso.")

        data = self._validated(data)
        birth = parse_birth_date(data.birth_date)

        now = self._clock()
        age = calculate_age(birth, now.date())

        db_session: Session = self._db_session_factory()
        try:
            repo = ParticipantRepository(db_session)
            participant = None
            previous_id: Optional[str] = None

            for attempt in range(1, self._max_id_attempts + 1):
                participant_id = self._id_policy.next_id(repo, now, previous=previous_id)
                try:
                    participant = repo.create_participant(
                        participant_id=participant_id,
                        name=data.name,
                        birth_date=data.birth_date,
                        age=age,
                        cpf=data.cpf,
                        church=data.church,
                        district=data.district,
                        whatsapp=data.whatsapp,
                    )
                    break
                except IntegrityError:
                    logger.warning(
                        f"Conflito de ID ao cadastrar participante: id={participant_id}, "
                        f"attempt={attempt}/{self._max_id_attempts}"
                    )
                    previous_id = participant_id

            if participant is None:
                logger.error(
                    f"Não foi possível alocar um ID livre após {self._max_id_attempts} tentativas"
                )
                raise PersistenceError("Erro ao gerar o ID.")

            record = participant.to_dict()
        except SQLAlchemyError as e:
            logger.error(
                f"Erro ao cadastrar participante: error={type(e).__name__}: {e}",
                exc_info=True,
            )
            raise PersistenceError("Erro ao cadastrar participante.") from e
        finally:
            db_session.close()

        logger.info(
            f"Participante cadastrado: id={record['id']}, age={record['age']}, "
            f"policy={self._id_policy.name}"
        )

        try:
            qr_code = self._encoder.encode(json.dumps(record, ensure_ascii=False))
        except EncodingError:
            logger.error(
                f"Participante salvo, mas o QR Code falhou: id={record['id']}"
            )
            raise

        return RegistrationResult(participant=record, qr_code=qr_code)

    def get_by_id(self, participant_id: str) -> dict:
        db_session: Session = self._db_session_factory()
        try:
            participant = ParticipantRepository(db_session).find_by_id(participant_id)
        except SQLAlchemyError as e:
            logger.error(
                f"Erro ao buscar participante: id={participant_id}, "
                f"error={type(e).__name__}: {e}",
                exc_info=True,
            )
            raise PersistenceError("Erro ao buscar participante.") from e
        finally:
            db_session.close()

        if participant is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return participant.to_dict()

    def get_qr_by_id(self, participant_id: str) -> str:
        """
        QR Code da página de confirmação do participante.
        """
        record = self.get_by_id(participant_id)
        return self._encoder.encode(self.confirmation_url(record["id"]))

    def list_participants(
        self,
        name: Optional[str] = None,
        participant_id: Optional[str] = None,
        cpf: Optional[str] = None,
    ) -> List[dict]:
        db_session: Session = self._db_session_factory()
        try:
            rows = ParticipantRepository(db_session).list_participants(
                name=name or None,
                participant_id=participant_id or None,
                cpf=cpf or None,
            )
        except SQLAlchemyError as e:
            logger.error(
                f"Erro ao consultar participantes: error={type(e).__name__}: {e}",
                exc_info=True,
            )
            raise PersistenceError("Erro ao consultar participantes.") from e
        finally:
            db_session.close()

        return [row.to_dict() for row in rows]

    def update(self, participant_id: str, data: ParticipantData) -> dict:
        """
        Substitui os seis campos do participante e recalcula a idade.
        O ID nunca muda.
        """
        data = self._validated(data)
        birth = parse_birth_date(data.birth_date)
        age = calculate_age(birth, self._clock().date())

        db_session: Session = self._db_session_factory()
        try:
            affected = ParticipantRepository(db_session).update_participant(
                participant_id=participant_id,
                name=data.name,
                birth_date=data.birth_date,
                age=age,
                cpf=data.cpf,
                church=data.church,
                district=data.district,
                whatsapp=data.whatsapp,
            )
        except SQLAlchemyError as e:
            raise PersistenceError("Erro ao editar participante.") from e
        finally:
            db_session.close()

        if affected == 0:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        logger.info(f"Participante atualizado: id={participant_id}, age={age}")
        return {
            "id": participant_id,
            "name": data.name,
            "birthDate": data.birth_date,
            "age": age,
            "cpf": data.cpf,
            "church": data.church,
            "district": data.district,
            "whatsapp": data.whatsapp,
        }

    def delete(self, participant_id: str) -> None:
        db_session: Session = self._db_session_factory()
        try:
            affected = ParticipantRepository(db_session).delete_participant(participant_id)
        except SQLAlchemyError as e:
            raise PersistenceError("Erro ao excluir participante.") from e
        finally:
            db_session.close()

        if affected == 0:
            raise NotFoundError(NOT_FOUND_MESSAGE)

        logger.info(f"Participante excluído: id={participant_id}")
