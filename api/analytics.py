from fastapi import APIRouter, Depends
from database import get_db
import crud
import schemas

router = APIRouter(prefix="/api", tags=["analytics"])


@router.post("/analytics/track")
async def track_event(event: schemas.AnalyticsEventCreate, db=Depends(get_db)):
    await crud.create_analytics_event(db, event)
    return {"success": True}
