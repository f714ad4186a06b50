from dataclasses import dataclass
import os
import logging
from typing import Tuple
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ID_POLICIES = ("sequential", "random")


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "y")


@dataclass(frozen=True)
class AppConfig:
    """
    Configurações principais do serviço de inscrição.

    Centraliza parâmetros críticos (banco, porta, política de IDs, CORS)
    para facilitar revisão, testes e mudanças futuras.
    """
    database_url: str = "sqlite:///./participants.db"
    host: str = "0.0.0.0"
    port: int = 3000
    env: str = "dev"  # "dev" ou "prod"
    id_policy: str = "sequential"  # "sequential" ou "random"
    id_max_attempts: int = 5  # tentativas de alocação de ID em caso de conflito
    cors_origins: Tuple[str, ...] = ("*",)
    confirmation_url_base: str = "https://frontend-teste-six.vercel.app/src/public/confirmation.html"
    auto_create_tables: bool = True
    log_dir: str = "logs"

    @classmethod
    def load_from_env(cls) -> "AppConfig":
        """
        Carrega configuração a partir de variáveis de ambiente.
        Primeiro tenta carregar do arquivo .env, depois do ambiente do sistema.
        Levanta erro explícito se algo crítico for inválido.
        """
        # Carrega variáveis do arquivo .env se existir
        load_dotenv()

        database_url = os.getenv("DATABASE_URL", "sqlite:///./participants.db")
        host = os.getenv("HOST", "0.0.0.0")
        port = int(os.getenv("PORT", "3000"))

        # Carregar ambiente (dev ou prod)
        env = os.getenv("ENV", "dev").lower()
        if env not in ("dev", "prod"):
            logger.warning(f"ENV inválido '{env}', usando 'dev' como padrão")
            env = "dev"

        id_policy = os.getenv("ID_POLICY", "sequential").strip().lower()
        if id_policy not in ID_POLICIES:
            raise RuntimeError(
                f"ID_POLICY inválida '{id_policy}'. Valores aceitos: {', '.join(ID_POLICIES)}."
            )

        id_max_attempts = int(os.getenv("ID_MAX_ATTEMPTS", "5"))
        if id_max_attempts < 1:
            raise RuntimeError("ID_MAX_ATTEMPTS deve ser maior ou igual a 1.")

        origins_raw = os.getenv("CORS_ORIGINS", "*")
        cors_origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip()) or ("*",)

        confirmation_url_base = os.getenv(
            "CONFIRMATION_URL_BASE",
            "https://frontend-teste-six.vercel.app/src/public/confirmation.html",
        )

        # Em produção, tabelas vêm das migrações Alembic
        default_create = "0" if env == "prod" else "1"
        auto_create_tables = _parse_bool(os.getenv("AUTO_CREATE_TABLES", default_create))

        log_dir = os.getenv("LOG_DIR", "logs")

        if env == "dev" and cors_origins == ("*",):
            logger.warning(
                "⚠️  MODO DEV: CORS_ORIGINS não configurada, aceitando qualquer origem. "
                "Configure CORS_ORIGINS com o endereço do frontend para produção."
            )

        return cls(
            database_url=database_url,
            host=host,
            port=port,
            env=env,
            id_policy=id_policy,
            id_max_attempts=id_max_attempts,
            cors_origins=cors_origins,
            confirmation_url_base=confirmation_url_base,
            auto_create_tables=auto_create_tables,
            log_dir=log_dir,
        )
