# easybuy/api/routers/health.py
from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/")
def health():
    return {"status": "ok", "message": "Server is running"}
