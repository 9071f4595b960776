"""Health check per load balancer e scheduler."""

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness: non tocca il database."""
    return {"status": "healthy", "service": "referee-card-stats"}
