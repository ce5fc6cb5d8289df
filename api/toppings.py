from fastapi import APIRouter, Depends
from typing import List
from database import get_db
import crud
import schemas

router = APIRouter(prefix="/api", tags=["toppings"])


@router.get("/toppings", response_model=List[schemas.Topping])
async def read_toppings(db=Depends(get_db)):
    return await crud.get_toppings(db)
