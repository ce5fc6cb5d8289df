from fastapi import APIRouter, Depends
from typing import List
from database import get_db
import crud
import schemas

router = APIRouter(prefix="/api", tags=["reviews"])


@router.get("/reviews", response_model=List[schemas.Review])
async def read_reviews(db=Depends(get_db)):
    """Published reviews only."""
    return await crud.get_reviews(db)
