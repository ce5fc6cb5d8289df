# main.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic.alias_generators import to_camel
from datetime import datetime
import logging

import config
from database import database, create_tables
from admin_api import router as admin_router
from api.analytics import router as analytics_router
from api.orders import router as orders_router
from api.payments import router as payments_router
from api.products import router as products_router
from api.reviews import router as reviews_router
from api.seed import router as seed_router
from api.toppings import router as toppings_router
from order_flow import CheckoutError
from pagouai import pagouai_service
from seed import create_sample_data
from toppings import ToppingLimitExceeded

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create tables
create_tables()
config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

app = FastAPI(
    title="Açaí Prime API",
    description="Açaí delivery storefront and back-office with PIX payments",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(products_router)
app.include_router(toppings_router)
app.include_router(reviews_router)
app.include_router(orders_router)
app.include_router(analytics_router)
app.include_router(payments_router)
app.include_router(seed_router)
app.include_router(admin_router)

app.mount("/attached_assets", StaticFiles(directory=config.UPLOAD_DIR), name="attached_assets")


@app.on_event("startup")
async def startup():
    await database.connect()
    if config.SEED_SAMPLE_DATA:
        await create_sample_data(database)
    logger.info("🚀 Açaí Prime API started (%s, PIX gateway: %s)",
                config.ENVIRONMENT, "pagouai" if pagouai_service.is_available() else "mock")


@app.on_event("shutdown")
async def shutdown():
    await database.disconnect()


@app.get("/")
async def read_root():
    return {
        "message": "Welcome to Açaí Prime API",
        "version": "1.0.0",
        "environment": config.ENVIRONMENT,
        "pixGateway": "pagouai" if pagouai_service.is_available() else "mock",
        "endpoints": {
            "docs": "/docs",
            "products": "/api/products",
            "toppings": "/api/toppings",
            "reviews": "/api/reviews",
            "orders": "/api/orders",
            "admin_login": "/api/admin/login",
        },
    }


@app.get("/health")
async def health_check():
    db_status = "connected"
    try:
        await database.execute("SELECT 1")
    except Exception as e:
        logger.error("Health check database query failed: %s", e)
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "pixGateway": "pagouai" if pagouai_service.is_available() else "mock",
        "timestamp": datetime.now().isoformat(),
    }


# ========== ERROR HANDLERS ==========
def _validation_response(message: str, errors) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": message, "detail": errors})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err["loc"][1:]), "message": err["msg"]}
        for err in exc.errors()
    ]
    return _validation_response("Dados inválidos", errors)


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    errors = [
        {"field": f"cardData.{to_camel(field)}", "message": "Campo obrigatório"}
        for field in getattr(exc, "missing", [])
    ]
    return _validation_response(str(exc), errors)


@app.exception_handler(ToppingLimitExceeded)
async def topping_limit_handler(request: Request, exc: ToppingLimitExceeded):
    return _validation_response(str(exc), [{"field": "toppings", "message": str(exc)}])


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Erro interno do servidor"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
