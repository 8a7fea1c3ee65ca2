"""Home Route - plaintext liveness response at the root path."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["home"])

HOME_TEXT = "this is my home route"


@router.get("/", response_class=PlainTextResponse)
async def home() -> str:
    return HOME_TEXT
