from fastapi import APIRouter, Depends, HTTPException
import logging

import config
import schemas
from database import get_db
from seed import create_sample_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["seed"])


@router.post("/seed", response_model=schemas.MessageResponse)
async def seed_data(db=Depends(get_db)):
    """Sample products, toppings and the default admin (development only)."""
    if config.IS_PRODUCTION:
        raise HTTPException(status_code=403, detail="Não permitido em produção")
    await create_sample_data(db)
    logger.info("Sample data seeded on request")
    return {"message": "Dados de exemplo criados com sucesso"}
