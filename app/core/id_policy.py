"""
Políticas de atribuição de ID de participante.

- random: UUID4, sem checagem prévia no banco.
- sequential: "<ano>-<contador de 4 dígitos>", contador = 1 + IDs já
  existentes no ano. A leitura e o insert não são atômicos: dois cadastros
  simultâneos podem calcular o mesmo ID; a chave primária rejeita o segundo
  e o registro tenta de novo passando o ID que colidiu.
"""
import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from ..storage.repository import ParticipantRepository

logger = logging.getLogger(__name__)


class RandomIdPolicy:
    name = "random"

    def next_id(
        self,
        repo: ParticipantRepository,
        now: datetime,
        previous: Optional[str] = None,
    ) -> str:
        return str(uuid4())


class SequentialIdPolicy:
    name = "sequential"

    def next_id(
        self,
        repo: ParticipantRepository,
        now: datetime,
        previous: Optional[str] = None,
    ) -> str:
        """
        Gera o próximo ID do ano corrente.

        `previous` é o ID que acabou de colidir. Nesse caso o contador
        passa a ser o maior já usado no ano + 1, já que exclusões deixam
        a contagem abaixo dos IDs existentes.
        """
        year = now.year
        prefix = f"{year}-"
        counter = repo.count_ids_with_prefix(prefix) + 1

        if previous:
            highest = repo.max_suffix_with_prefix(prefix)
            logger.info(
                f"Recalculando ID após conflito: previous={previous}, "
                f"count_based={counter}, highest={highest}"
            )
            counter = max(counter, highest + 1)

        return f"{year}-{counter:04d}"


def build_id_policy(name: str):
    """
    Retorna a política de ID pelo nome ("sequential" ou "random").
    """
    policies = {
        "sequential": SequentialIdPolicy,
        "random": RandomIdPolicy,
    }
    try:
        return policies[name]()
    except KeyError:
        raise ValueError(f"Política de ID desconhecida: {name}") from None
