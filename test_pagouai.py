# test_pagouai.py
import asyncio
import base64
import json
from decimal import Decimal

import httpx

from pagouai import PagouAiService, build_mock_pix_code, create_mock_pix_payment, crc16_ccitt

CHARGE = dict(
    amount=Decimal("37.80"),
    customer_name="Maria Silva",
    customer_email="maria@example.com",
    customer_document="529.982.247-25",
    customer_phone="11987654321",
    description="Pedido Açaí Prime #abc",
    order_id="abc",
)


def service(handler, api_key="test-key"):
    return PagouAiService(api_key=api_key, base_url="https://pagou.test/v1", transport=httpx.MockTransport(handler))


def test_unconfigured_gateway_never_calls_out():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    result = asyncio.run(service(handler, api_key=None).create_pix_payment(**CHARGE))
    assert not result.success
    assert "PAGOUAI_API_KEY" in result.error
    assert calls == []


def test_create_pix_payment_sends_cob_payload():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "txid": "tx-123",
            "pixCopiaECola": "00020126...6304ABCD",
            "qrCode": "data:image/png;base64,AAAA",
            "calendario": {"criacao": "2024-01-01T10:00:00Z", "expiracao": 900},
        })

    result = asyncio.run(service(handler).create_pix_payment(**CHARGE))

    assert result.success
    assert result.txid == "tx-123"
    assert result.copy_paste_code == "00020126...6304ABCD"
    assert result.qr_code_image == "data:image/png;base64,AAAA"
    assert seen["url"] == "https://pagou.test/v1/pix/cobranca"
    assert seen["auth"] == "Bearer test-key"
    assert seen["body"] == {
        "calendario": {"expiracao": 900},
        "devedor": {"cpf": "52998224725", "nome": "Maria Silva"},
        "valor": {"original": "37.80"},
        "solicitacaoPagador": "Pedido Açaí Prime #abc",
        "infoAdicionais": [{"nome": "Pedido", "valor": "abc"}],
    }


def test_provider_error_is_returned_not_raised():
    result = asyncio.run(service(lambda request: httpx.Response(500, text="boom")).create_pix_payment(**CHARGE))
    assert not result.success
    assert result.error == "boom"


def test_timeout_is_returned_not_raised():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = asyncio.run(service(handler).create_pix_payment(**CHARGE))
    assert not result.success
    assert "timed out" in result.error


def test_response_without_copy_paste_code_is_a_failure():
    result = asyncio.run(service(lambda request: httpx.Response(200, json={"txid": "x"})).create_pix_payment(**CHARGE))
    assert not result.success


def test_check_payment_status():
    def handler(request):
        assert request.url.path == "/v1/pix/cobranca/tx-123"
        return httpx.Response(200, json={"txid": "tx-123", "status": "CONCLUIDA"})

    assert asyncio.run(service(handler).check_payment_status("tx-123"))["status"] == "CONCLUIDA"
    assert asyncio.run(service(lambda request: httpx.Response(404)).check_payment_status("nope")) is None


def test_crc16_ccitt_check_value():
    assert crc16_ccitt("123456789") == "29B1"


def test_mock_pix_code_layout():
    code = build_mock_pix_code(Decimal("37.8"), key="chave-teste")
    assert code.startswith("000201")
    assert "0014BR.GOV.BCB.PIX0111chave-teste" in code
    assert "540537.80" in code
    assert "5910Acai Prime" in code
    assert "6009SAO PAULO" in code
    assert code[-8:-4] == "6304"
    assert code[-4:] == crc16_ccitt(code[:-4])


def test_mock_payment_renders_png_qr():
    result = create_mock_pix_payment(Decimal("37.80"))
    assert result.success
    assert result.txid is None
    assert result.copy_paste_code == result.qr_code
    prefix = "data:image/png;base64,"
    assert result.qr_code_image.startswith(prefix)
    assert base64.b64decode(result.qr_code_image[len(prefix):]).startswith(b"\x89PNG")
