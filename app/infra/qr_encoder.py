import base64
import io
import logging

import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q

from ..core.errors import EncodingError

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}


class QRCodeEncoder:
    """
    Gera QR Codes em PNG e devolve como data URL
    (pronto para usar em <img src="...">).
    """

    def __init__(self, box_size: int = 10, border: int = 4, error_correction: str = "M") -> None:
        if error_correction not in ERROR_CORRECTION_LEVELS:
            raise ValueError(f"Nível de correção inválido: {error_correction}")
        self._box_size = box_size
        self._border = border
        self._error_correction = ERROR_CORRECTION_LEVELS[error_correction]

    def encode(self, payload: str) -> str:
        """
        Codifica o payload em um QR Code e retorna "data:image/png;base64,...".

        Levanta EncodingError em qualquer falha do gerador.
        """
        try:
            qr = qrcode.QRCode(
                version=None,
                error_correction=self._error_correction,
                box_size=self._box_size,
                border=self._border,
            )
            qr.add_data(payload)
            qr.make(fit=True)

            img = qr.make_image(fill_color="black", back_color="white")

            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
            img_str = base64.b64encode(buffer.getvalue()).decode("ascii")
        except Exception as e:
            logger.error(
                f"Erro ao gerar o QR Code: payload_length={len(payload or '')}, "
                f"error={type(e).__name__}: {e}",
                exc_info=True,
            )
            raise EncodingError("Erro ao gerar o QR Code.") from e

        logger.debug(f"QR Code gerado: payload_length={len(payload)}")
        return f"data:image/png;base64,{img_str}"
