import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def create_engine_from_url(database_url: str):
    """
    Cria o engine do cadastro de participantes.

    - PostgreSQL: pool com pool_pre_ping.
    - SQLite: check_same_thread=False, pois rotas síncronas rodam no
      threadpool do FastAPI.
    - SQLite em memória: StaticPool, uma conexão única (senão cada
      conexão enxergaria um banco vazio).
    """
    url = database_url.lower()

    if "postgres" in url:
        engine = create_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
        )
        logger.info("Engine PostgreSQL criado com pool_pre_ping=True")
        return engine

    sqlite_args = {"check_same_thread": False}
    if database_url in IN_MEMORY_URLS:
        engine = create_engine(
            database_url,
            echo=False,
            connect_args=sqlite_args,
            poolclass=StaticPool,
        )
        logger.info("Engine SQLite em memória criado")
    else:
        engine = create_engine(database_url, echo=False, connect_args=sqlite_args)
        logger.info("Engine SQLite criado")

    return engine


def create_session_factory(database_url: str, create_tables: bool = False, env: str = "dev"):
    """
    Cria a factory de sessões usada pelo ParticipantRegistry.

    Args:
        database_url: URL de conexão do banco
        create_tables: cria a tabela participants via metadata (dev/test);
                      ignorado em env="prod", onde o schema vem do Alembic
        env: "dev" ou "prod"
    """
    engine = create_engine_from_url(database_url)

    if create_tables:
        if env == "prod":
            logger.warning(
                "⚠️  create_tables=True em produção ignorado. "
                "Rode 'alembic upgrade head' para criar a tabela participants."
            )
        else:
            from . import models  # noqa: F401
            Base.metadata.create_all(bind=engine)
            logger.info("Tabela participants criada/verificada (modo dev/test)")

    return sessionmaker(bind=engine, expire_on_commit=False)
