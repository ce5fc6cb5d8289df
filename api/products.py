from fastapi import APIRouter, Depends, HTTPException
from typing import List
from database import get_db
import crud
import schemas

router = APIRouter(prefix="/api", tags=["products"])


@router.get("/products", response_model=List[schemas.Product])
async def read_products(db=Depends(get_db)):
    return await crud.get_products(db)


@router.get("/products/{product_id}", response_model=schemas.Product)
async def read_product(product_id: str, db=Depends(get_db)):
    db_product = await crud.get_product(db, product_id=product_id)
    if db_product is None or not db_product["is_active"]:
        raise HTTPException(status_code=404, detail="Produto não encontrado")
    return db_product
