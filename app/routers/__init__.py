from app.routers.combos import router as combos_router
from app.routers.coverage import router as coverage_router
from app.routers.cron import router as cron_router
from app.routers.health import router as health_router
from app.routers.leagues import router as leagues_router
from app.routers.probability import router as probability_router
from app.routers.ratings import router as ratings_router
from app.routers.referees import router as referees_router

__all__ = [
    "health_router",
    "cron_router",
    "referees_router",
    "ratings_router",
    "leagues_router",
    "probability_router",
    "combos_router",
    "coverage_router",
]
