import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dominion.config import settings
from dominion.routers import galaxy, games, snapshots, turns

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Dominion",
    description="Turn engine for a single-player galactic strategy game",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:8000", "http://127.0.0.1:8000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(games.router)
app.include_router(turns.router)
app.include_router(galaxy.router)
app.include_router(snapshots.router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
