"""FastAPI dependencies resolving objects created in the app lifespan."""
import httpx
from fastapi import Request

from ..config import Settings
from ..services.player import RadioPlayer


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_player(request: Request) -> RadioPlayer:
    return request.app.state.player
