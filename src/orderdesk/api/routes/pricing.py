from __future__ import annotations

from fastapi import APIRouter

from orderdesk.application.dto.requests import QuoteRequest
from orderdesk.application.dto.responses import PriceQuoteResponse
from orderdesk.application.use_cases.quote_order import QuoteOrder
from orderdesk.infrastructure.container import get_container

router = APIRouter(tags=["pricing"])


@router.post("/pricing/quote", response_model=PriceQuoteResponse)
def quote(request_dto: QuoteRequest) -> PriceQuoteResponse:
    return QuoteOrder(menu_repository=get_container().menu_repository).execute(request_dto)
