import logging
import time
from typing import List, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import AppConfig
from ..core.errors import RegistryError
from ..core.id_policy import build_id_policy
from ..core.registration_state import ParticipantData
from ..core.registry import ParticipantRegistry
from ..infra.qr_encoder import QRCodeEncoder
from ..storage.database import create_session_factory

logger = logging.getLogger(__name__)


class ParticipantFields(BaseModel):
    # Opcionais aqui: a ausência vira 400 no registro, não 422
    name: Optional[str] = None
    birthDate: Optional[str] = None
    cpf: Optional[str] = None
    church: Optional[str] = None
    district: Optional[str] = None
    whatsapp: Optional[str] = None

    def to_data(self) -> ParticipantData:
        return ParticipantData(
            name=self.name,
            birth_date=self.birthDate,
            cpf=self.cpf,
            church=self.church,
            district=self.district,
            whatsapp=self.whatsapp,
        )


class RegisterRequest(ParticipantFields):
    acceptTerms: bool = False


class ParticipantOut(BaseModel):
    id: str
    name: str
    birthDate: str
    age: Optional[int] = None
    cpf: str
    church: str
    district: str
    whatsapp: str


class RegisterResponse(BaseModel):
    participant: ParticipantOut
    qrCode: str


class ParticipantResponse(BaseModel):
    participant: ParticipantOut


class QRCodeResponse(BaseModel):
    qrCode: str


class MessageResponse(BaseModel):
    message: str


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware que gera request_id único para cada requisição
    e adiciona aos logs e headers de resposta.

    Erros inesperados viram 500 {"message"} aqui mesmo, para que a
    resposta ainda passe pelo CORS e leve o X-Request-ID.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = uuid4().hex[:16]
        request.state.request_id = request_id

        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Erro inesperado: request_id={request_id}, path={request.url.path}, "
                f"error={type(e).__name__}: {e}",
                exc_info=True,
            )
            response = JSONResponse(status_code=500, content={"message": "Erro interno."})
        response.headers["X-Request-ID"] = request_id

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request processado: request_id={request_id}, "
            f"method={request.method}, path={request.url.path}, "
            f"status={response.status_code}, duration_ms={duration_ms:.2f}"
        )

        return response


def mask_cpf(cpf: Optional[str]) -> str:
    """
    Mascara o CPF para logs (mantém só os 3 primeiros e 2 últimos dígitos).
    Ex: "12345678910" -> "123******10"
    """
    if not cpf or len(cpf) <= 5:
        return "****"
    return f"{cpf[:3]}{'*' * (len(cpf) - 5)}{cpf[-2:]}"


def build_registry(config: AppConfig) -> ParticipantRegistry:
    """
    Monta o ParticipantRegistry com banco, encoder e política de ID da config.
    """
    session_factory = create_session_factory(
        config.database_url,
        create_tables=config.auto_create_tables,
        env=config.env,
    )
    return ParticipantRegistry(
        db_session_factory=session_factory,
        encoder=QRCodeEncoder(),
        id_policy=build_id_policy(config.id_policy),
        confirmation_url_base=config.confirmation_url_base,
        max_id_attempts=config.id_max_attempts,
    )


def create_app(
    config: Optional[AppConfig] = None,
    registry: Optional[ParticipantRegistry] = None,
) -> FastAPI:
    """
    Cria a aplicação FastAPI e injeta dependências principais (config + registry).
    """
    if config is None:
        config = AppConfig.load_from_env()
    if registry is None:
        registry = build_registry(config)

    db_type = (
        "sqlite" if "sqlite" in config.database_url
        else "postgres" if "postgres" in config.database_url
        else "unknown"
    )
    logger.info(
        f"Aplicação configurada: env={config.env}, database_type={db_type}, "
        f"id_policy={config.id_policy}, cors_origins={','.join(config.cors_origins)}"
    )

    app = FastAPI(
        title="Participant Registry API",
        version="0.1.0",
        description="API de inscrição de participantes com QR Code.",
    )
    app.state.registry = registry

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["OPTIONS", "GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        request_id = getattr(request.state, "request_id", "unknown")
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            f"Erro de registro: request_id={request_id}, path={request.url.path}, "
            f"status={exc.status_code}, error={type(exc).__name__}: {exc.message}"
        )
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        request_id = getattr(request.state, "request_id", "unknown")
        logger.warning(
            f"Corpo da requisição inválido: request_id={request_id}, "
            f"path={request.url.path}, errors={len(exc.errors())}"
        )
        return JSONResponse(status_code=400, content={"message": "Dados inválidos."})

    @app.get("/health")
    def health_check():
        """
        Endpoint de health check para monitoramento e Docker healthchecks.
        """
        db_ok = True
        try:
            registry.ping()
        except Exception as e:
            logger.warning(f"Database health check falhou: {e}")
            db_ok = False

        return {
            "status": "healthy" if db_ok else "degraded",
            "database": "ok" if db_ok else "error",
        }

    def register_participant(payload: RegisterRequest, request: Request) -> RegisterResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(
            f"Recebida requisição de inscrição: request_id={request_id}, "
            f"cpf={mask_cpf(payload.cpf)}, accept_terms={payload.acceptTerms}"
        )

        result = registry.register(payload.to_data(), accept_terms=payload.acceptTerms)
        return RegisterResponse(participant=result.participant, qrCode=result.qr_code)

    def list_participants(
        name: Optional[str] = None,
        id: Optional[str] = None,
        cpf: Optional[str] = None,
    ) -> List[ParticipantOut]:
        return registry.list_participants(name=name, participant_id=id, cpf=cpf)

    # Rota canônica + aliases usados por clientes antigos
    for path in ("/api/participants", "/api/register", "/api/users"):
        app.add_api_route(
            path,
            register_participant,
            methods=["POST"],
            response_model=RegisterResponse,
        )
    for path in ("/api/participants", "/api/users"):
        app.add_api_route(
            path,
            list_participants,
            methods=["GET"],
            response_model=List[ParticipantOut],
        )

    @app.get("/api/participants/{participant_id}", response_model=ParticipantResponse)
    def get_participant(participant_id: str) -> ParticipantResponse:
        return ParticipantResponse(participant=registry.get_by_id(participant_id))

    @app.get("/api/participants/{participant_id}/qrcode", response_model=QRCodeResponse)
    def get_participant_qrcode(participant_id: str) -> QRCodeResponse:
        return QRCodeResponse(qrCode=registry.get_qr_by_id(participant_id))

    @app.put("/api/participants/{participant_id}", response_model=MessageResponse)
    def update_participant(
        participant_id: str,
        payload: ParticipantFields,
        request: Request,
    ) -> MessageResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(
            f"Recebida requisição de edição: request_id={request_id}, id={participant_id}"
        )
        registry.update(participant_id, payload.to_data())
        return MessageResponse(message="Participante atualizado com sucesso.")

    @app.delete("/api/participants/{participant_id}", response_model=MessageResponse)
    def delete_participant(participant_id: str, request: Request) -> MessageResponse:
        request_id = getattr(request.state, "request_id", "unknown")
        logger.info(
            f"Recebida requisição de exclusão: request_id={request_id}, id={participant_id}"
        )
        registry.delete(participant_id)
        return MessageResponse(message="Participante excluído com sucesso.")

    return app
