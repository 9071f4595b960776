"""Referee Card Stats: statistiche cartellini arbitri, bias casa/trasferta e probabilità over/under."""

import logging

from fastapi import FastAPI

from app.core.database import init_db
from app.routers import (
    combos_router,
    coverage_router,
    cron_router,
    health_router,
    leagues_router,
    probability_router,
    ratings_router,
    referees_router,
)

app = FastAPI(
    title="Referee Card Stats",
    description="Referee card statistics API: season aggregates, home/away bias, foul leniency, card probabilities, fan ratings.",
    version="0.1.0",
)

app.include_router(health_router)
app.include_router(cron_router)
app.include_router(referees_router)
app.include_router(ratings_router)
app.include_router(leagues_router)
app.include_router(probability_router)
app.include_router(combos_router)
app.include_router(coverage_router)


@app.on_event("startup")
def on_startup():
    """Inizializza le tabelle all'avvio."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    init_db()
