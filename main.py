"""
Main FastAPI application for the SKU Specification Resolution Service.
Exposes the resolution engine statelessly: each request carries the product
snapshot and the current selection, and the derived view is recomputed.
"""

import logging
from typing import Union
from fastapi import FastAPI, HTTPException

from models import (
    ConfirmationPayload, ModeMismatchError, ResolutionError, ResolutionMode, ResolveRequest,
    SelectableRequest, SelectableResponse, SessionView,
)
from resolution_session import LegacySession, StructuredSession, open_resolution
from config import settings


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# FastAPI application with OpenAPI documentation
app = FastAPI(
    title=settings.SERVICE_NAME,
    description="""
    Resolves user-selected specification values into a concrete purchasable
    variant and derives everything a spec chooser displays.

    ## Features
    - **Variant Matching**: Exact, in-stock match for complete selections
    - **Selectability**: Which value chips remain reachable given other choices
    - **Display Values**: Price, score price, stock and image with fallback chains
    - **Summaries**: "Color / Size" text and name-to-value maps for order lines
    - **Legacy Specs**: Flat name/value specs for products without variants

    The service is stateless; post the product snapshot with every request.
    """,
    version=settings.SERVICE_VERSION,
)


def open_request_session(request: ResolveRequest) -> Union[StructuredSession, LegacySession]:
    """
    Open a session and replay the request's selection through it, so that
    invalid entries are reported instead of silently dropped.
    """
    session = open_resolution(request.product)
    if session.mode == ResolutionMode.STRUCTURED:
        if request.legacy_selection:
            raise ModeMismatchError("Legacy selection sent for a product with structured variants")
        for dimension_id, value_id in request.selection.items():
            session.select_value(dimension_id, value_id)
    else:
        if request.selection:
            raise ModeMismatchError("Structured selection sent for a product without variants")
        for name, value in request.legacy_selection.items():
            session.select_legacy_value(name, value)
    session.set_quantity(request.quantity)
    return session


@app.get("/", tags=["Health"])
def root():
    """Health check endpoint"""
    return {
        "service": settings.SERVICE_NAME,
        "status": "healthy",
        "version": settings.SERVICE_VERSION,
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check with configuration summary"""
    return {
        "status": "healthy",
        "components": {
            "engine": "in-process",
            "default_max_purchase": settings.DEFAULT_MAX_PURCHASE,
        },
    }


@app.post("/resolutions/view", response_model=SessionView, tags=["Resolution"])
def resolve_view(request: ResolveRequest):
    """
    Derive the chooser state for a product and selection.

    Returns the matched variant (if the selection is complete and in stock),
    display price/score price/stock/image, summary text, per-chip
    selectability and the purchase status.
    """
    try:
        session = open_request_session(request)
        return session.view()
    except ResolutionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.post("/resolutions/selectable", response_model=SelectableResponse, tags=["Resolution"])
def check_selectable(request: SelectableRequest):
    """
    Whether one (dimension, value) pair is still reachable under the selection.

    Only structured products have selectability; legacy products answer 400.
    Unknown target dimensions are reported as not selectable.
    """
    try:
        session = open_resolution(request.product)
        for dimension_id, value_id in request.selection.items():
            session.select_value(dimension_id, value_id)
        selectable = session.is_selectable(request.dimension_id, request.value_id)
    except ResolutionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SelectableResponse(selectable=selectable)


@app.post("/resolutions/confirm", response_model=ConfirmationPayload, tags=["Resolution"])
def confirm_resolution(request: ResolveRequest):
    """
    Build the order-line payload for a selection.

    Rejected with 409 when the selection cannot be bought (incomplete,
    unavailable combination or no stock).
    """
    try:
        session = open_request_session(request)
    except ResolutionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not session.can_buy:
        raise HTTPException(
            status_code=409,
            detail=f"Selection cannot be purchased: {session.purchase_status.value}",
        )
    return session.confirm()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
