import logging
import uvicorn
import os
from logging.handlers import RotatingFileHandler
from datetime import datetime

from app.config import AppConfig
from app.api.http import create_app

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_dir: str) -> str:
    """
    Configura o root logger: console + arquivo rotativo (10MB, 5 backups).
    Retorna o caminho do arquivo de log.
    """
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)

    log_file = os.path.join(log_dir, "app.log")
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)
    return log_file


config = AppConfig.load_from_env()
log_file = configure_logging(config.log_dir)

logging.info(f"Logging configurado. Arquivo de log: {log_file}")
logging.info(
    f"Serviço de inscrição iniciado em {datetime.now().strftime(DATE_FORMAT)}: "
    f"env={config.env}, port={config.port}, id_policy={config.id_policy}"
)

app = create_app(config)

if __name__ == "__main__":
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level="info",
    )
