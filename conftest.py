# conftest.py
import os
import tempfile

_tmp_dir = tempfile.mkdtemp(prefix="acai-prime-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp_dir}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_tmp_dir, "attached_assets")
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["PAGOUAI_API_KEY"] = ""
os.environ["PAGOUAI_WEBHOOK_SECRET"] = ""
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import config  # noqa: E402


@pytest.fixture
def gateway():
    from pagouai import PagouAiService
    return PagouAiService(api_key=None)


@pytest.fixture
def limiter():
    from rate_limit import InMemoryAttemptStore, LoginRateLimiter
    return LoginRateLimiter(InMemoryAttemptStore(), max_attempts=5, window_seconds=900)


@pytest.fixture
def client(gateway, limiter):
    from main import app
    from database import create_tables, drop_tables
    from dependencies import get_payment_gateway, get_rate_limiter

    drop_tables()
    create_tables()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client):
    response = client.post("/api/seed")
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(seeded_client):
    response = seeded_client.post("/api/admin/login", json=admin_credentials())
    assert response.status_code == 200
    return seeded_client


def admin_credentials(password=None):
    return {"email": config.DEFAULT_ADMIN_EMAIL, "password": password or config.DEFAULT_ADMIN_PASSWORD}


@pytest.fixture
def credentials():
    return admin_credentials


@pytest.fixture
def order_payload():
    return build_order_payload


def build_order_payload(client, payment_method="pix", **overrides):
    """Checkout body built from the seeded catalog: 2x 300ml + 1x 500ml."""
    products = {p["size"]: p for p in client.get("/api/products").json()}
    small, large = products["300ml"], products["500ml"]
    payload = {
        "customerName": "Maria Silva",
        "customerPhone": "(11) 98765-4321",
        "customerEmail": "maria@example.com",
        "customerDocument": "529.982.247-25",
        "deliveryAddress": "Rua das Palmeiras, 100",
        "deliveryCep": "01310-100",
        "deliveryCity": "São Paulo",
        "deliveryState": "sp",
        "items": [
            {"productId": small["id"], "name": small["name"], "price": small["price"], "quantity": 2},
            {"productId": large["id"], "name": large["name"], "price": large["price"], "quantity": 1},
        ],
        "toppings": [],
        "totalAmount": "44.70",
        "paymentMethod": payment_method,
    }
    if payment_method == "credit_card":
        payload["cardData"] = {
            "cardNumber": "4111 1111 1111 1111",
            "cardName": "MARIA SILVA",
            "cardExpiry": "12/30",
            "cardCvv": "123",
        }
    payload.update(overrides)
    return payload
