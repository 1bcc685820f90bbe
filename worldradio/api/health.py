"""Health check endpoint."""
from fastapi import APIRouter, Depends

from ..services.player import RadioPlayer
from .deps import get_player

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(player: RadioPlayer = Depends(get_player)) -> dict:
    """Liveness check, with the number of stations loaded."""
    return {"status": "healthy", "stations_loaded": len(player.all_stations)}
