from fastapi import APIRouter, Depends

from quizprep.db.session import Database, get_db

router = APIRouter()


@router.get("/health")
def health_endpoint(db: Database = Depends(get_db)) -> dict:
    db.ping()
    return {"status": "ok"}
