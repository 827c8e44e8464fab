from fastapi import APIRouter

from order_harvest.config import settings

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/ready")
def ready():
    configured = bool(settings.ORDER_API_REFRESH_TOKEN.strip() or settings.ORDER_API_ID_TOKEN.strip())
    return {
        "status": "ready" if configured else "not_ready",
        "credentials_configured": configured,
    }
