"""
Testes do gerador de QR Code.
"""
import base64

import pytest

from app.core.errors import EncodingError
from app.infra.qr_encoder import QRCodeEncoder

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def test_encode_returns_png_data_url():
    data_url = QRCodeEncoder().encode('{"id": "2024-0001", "name": "Maria"}')

    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    assert base64.b64decode(data_url[len(prefix):]).startswith(PNG_SIGNATURE)


def test_payload_too_large_raises_encoding_error():
    # Acima da capacidade máxima do QR (versão 40)
    with pytest.raises(EncodingError) as exc_info:
        QRCodeEncoder(error_correction="H").encode("x" * 5000)
    assert exc_info.value.message == "Erro ao gerar o QR Code."


def test_invalid_error_correction_level():
    with pytest.raises(ValueError):
        QRCodeEncoder(error_correction="Z")
