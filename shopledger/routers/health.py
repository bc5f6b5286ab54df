import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from shopledger.database import get_db

router = APIRouter(tags=["Health"])

logger = logging.getLogger("app")


@router.get("/health")
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    logger.info("Health check endpoint called")
    return {"status": "ok", "message": "Shop Ledger API is running"}
