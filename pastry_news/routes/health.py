from fastapi import APIRouter

from pastry_news.records import utc_now_iso
from pastry_news.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="OK", message="Pastry News API is running", timestamp=utc_now_iso()
    )
