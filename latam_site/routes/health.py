#  Latam Site - Health Route
#
#  Liveness probe. Never gated: no rate limit, no CSRF.
#
#  Depends on: models/schemas.py
#  Used by:    app.py

from datetime import datetime, timezone

from fastapi import APIRouter

from latam_site.models.schemas import HealthOut

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> HealthOut:
    """Liveness check for load balancers and uptime monitors."""
    return HealthOut(
        status="OK",
        message="Servidor funcionando correctamente",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
