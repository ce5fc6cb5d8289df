# pagouai.py
"""Pagou.ai PIX client plus the local mock used when it can't be reached."""
import base64
import io
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import httpx
import qrcode

import config
from validators import only_digits

logger = logging.getLogger(__name__)

PIX_EXPIRATION_SECONDS = 900
MERCHANT_NAME = "Acai Prime"
MERCHANT_CITY = "SAO PAULO"


@dataclass
class PixPaymentResult:
    success: bool
    txid: Optional[str] = None
    qr_code: Optional[str] = None
    qr_code_image: Optional[str] = None
    copy_paste_code: Optional[str] = None
    expires_at: Optional[str] = None
    error: Optional[str] = None


class PagouAiService:
    def __init__(self, api_key: Optional[str] = None, base_url: str = config.PAGOUAI_BASE_URL,
                 timeout: float = config.PAGOUAI_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

        if not self.api_key:
            logger.warning("PAGOUAI_API_KEY not set, PIX payments will use the local mock")

    def is_available(self) -> bool:
        return bool(self.api_key)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    async def create_pix_payment(self, amount, customer_name: str, customer_email: str,
                                 customer_document: str, customer_phone: str,
                                 description: str, order_id: str) -> PixPaymentResult:
        """Create a PIX charge. Failures come back as success=False, never raised."""
        if not self.is_available():
            return PixPaymentResult(success=False, error="Pagou.ai não está configurado. Configure PAGOUAI_API_KEY.")

        payload = {
            "calendario": {"expiracao": PIX_EXPIRATION_SECONDS},
            "devedor": {
                "cpf": only_digits(customer_document),
                "nome": customer_name,
            },
            "valor": {"original": f"{Decimal(str(amount)):.2f}"},
            "solicitacaoPagador": description,
            "infoAdicionais": [{"nome": "Pedido", "valor": order_id}],
        }

        logger.info("Creating Pagou.ai PIX charge for order %s", order_id)
        try:
            async with self._client() as client:
                response = await client.post("/pix/cobranca", json=payload)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning("Pagou.ai rejected PIX charge for order %s: %s %s",
                           order_id, e.response.status_code, e.response.text)
            return PixPaymentResult(success=False, error=e.response.text or str(e))
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Pagou.ai PIX charge failed for order %s: %s", order_id, e)
            return PixPaymentResult(success=False, error=str(e) or e.__class__.__name__)

        if not isinstance(data, dict) or not data.get("pixCopiaECola"):
            return PixPaymentResult(success=False, error="Resposta inválida da Pagou.ai")

        logger.info("Pagou.ai PIX charge %s created", data.get("txid"))
        return PixPaymentResult(
            success=True,
            txid=data.get("txid"),
            qr_code=data.get("pixCopiaECola"),
            qr_code_image=data.get("qrCode"),
            copy_paste_code=data.get("pixCopiaECola"),
            expires_at=(data.get("calendario") or {}).get("criacao"),
        )

    async def check_payment_status(self, txid: str) -> Optional[dict]:
        """Best-effort status query; None on any error."""
        if not self.is_available():
            return None
        try:
            async with self._client() as client:
                response = await client.get(f"/pix/cobranca/{txid}")
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Pagou.ai status query for %s failed: %s", txid, e)
            return None


# ========== MOCK PIX ==========
def _emv(field_id: str, value: str) -> str:
    return f"{field_id}{len(value):02d}{value}"


def crc16_ccitt(payload: str) -> str:
    crc = 0xFFFF
    for byte in payload.encode("utf-8"):
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ 0x1021) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"


def build_mock_pix_code(amount, key: Optional[str] = None) -> str:
    """PIX copy-paste payload in BR Code layout with a random key."""
    key = key or str(uuid.uuid4())
    merchant_account = _emv("00", "BR.GOV.BCB.PIX") + _emv("01", key)
    payload = (
        _emv("00", "01")
        + _emv("26", merchant_account)
        + _emv("52", "0000")
        + _emv("53", "986")
        + _emv("54", f"{Decimal(str(amount)):.2f}")
        + _emv("58", "BR")
        + _emv("59", MERCHANT_NAME)
        + _emv("60", MERCHANT_CITY)
        + _emv("62", _emv("05", "***"))
        + "6304"
    )
    return payload + crc16_ccitt(payload)


def render_qr_data_uri(data: str) -> str:
    qr = qrcode.QRCode(box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffered = io.BytesIO()
    img.save(buffered, "PNG")
    qr_b64 = base64.b64encode(buffered.getvalue()).decode("ascii")
    return f"data:image/png;base64,{qr_b64}"


def create_mock_pix_payment(amount) -> PixPaymentResult:
    code = build_mock_pix_code(amount)
    return PixPaymentResult(
        success=True,
        qr_code=code,
        qr_code_image=render_qr_data_uri(code),
        copy_paste_code=code,
    )


pagouai_service = PagouAiService(api_key=config.PAGOUAI_API_KEY)
