# src/pa_auction/api/router.py
"""Auction REST API — the web variant of the auction: one share per request."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pa_auction.application.schemas import PurchaseShareRequest
from src.pa_auction.application.service import AuctionApplicationService
from src.pa_common.database import get_db_session
from src.pa_common.response import ApiResponse, success_response

router = APIRouter(tags=["auction"])
_service = AuctionApplicationService()


def get_auction_service() -> AuctionApplicationService:
    return _service


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


@router.post("/auction/purchases", response_model=ApiResponse)
async def purchase_share(
    body: PurchaseShareRequest,
    request: Request,
    service: Annotated[AuctionApplicationService, Depends(get_auction_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await service.purchase_share(db, body.player_name, body.player_id)
    return success_response(result.model_dump(), _request_id(request))


@router.get("/players/{player_id}", response_model=ApiResponse)
async def get_player(
    player_id: str,
    request: Request,
    service: Annotated[AuctionApplicationService, Depends(get_auction_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await service.get_player(db, player_id)
    return success_response(result.model_dump(), _request_id(request))


@router.get("/planets/{planet_id}", response_model=ApiResponse)
async def get_planet(
    planet_id: int,
    request: Request,
    service: Annotated[AuctionApplicationService, Depends(get_auction_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await service.get_planet(db, planet_id)
    return success_response(result.model_dump(), _request_id(request))
