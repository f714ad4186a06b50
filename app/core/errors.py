"""
Erros tipados do registro de participantes.

Cada erro carrega a mensagem exibida ao usuário e o status HTTP
correspondente; a camada HTTP apenas traduz.
"""


class RegistryError(Exception):
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(RegistryError):
    """Termos não aceitos, campo obrigatório ausente ou data inválida."""
    status_code = 400


class NotFoundError(RegistryError):
    """Nenhum participante com o ID informado."""
    status_code = 404


class PersistenceError(RegistryError):
    """Falha de leitura/escrita no banco (inclui conflito de ID esgotado)."""
    status_code = 500


class EncodingError(RegistryError):
    """Falha ao gerar o QR Code."""
    status_code = 500
