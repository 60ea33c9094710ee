"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Query, Request, WebSocket
from fastapi.websockets import WebSocketDisconnect
from pydantic import ValidationError

from nutrition_lookup.api.admin import router as admin_router
from nutrition_lookup.api.models import (
    FoodItemModel,
    LiveSearchMessage,
    SearchResponse,
    SearchSnapshotModel,
)
from nutrition_lookup.app_logging import configure_logging
from nutrition_lookup.containers import AppContainer
from nutrition_lookup.domain.search import BarcodeStatus, SearchSnapshot
from nutrition_lookup.services.controller import DebouncedSearchController
from nutrition_lookup.services.ranking import MAX_RESULTS

_BARCODE_ERRORS = {
    BarcodeStatus.INVALID: HTTPStatus.UNPROCESSABLE_ENTITY,
    BarcodeStatus.NOT_FOUND: HTTPStatus.NOT_FOUND,
    BarcodeStatus.FAILED: HTTPStatus.SERVICE_UNAVAILABLE,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.warm_up()
        except Exception:
            logger.exception("Failed to preload provider data")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods/search")
    async def search_foods(
        request: Request,
        q: str = "",
        limit: int = Query(default=MAX_RESULTS, ge=1, le=MAX_RESULTS),
    ) -> SearchResponse:
        """Run a one-shot text search through the provider fallback chain."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.search_service.search(q)
        response = SearchResponse.model_validate(outcome)
        response.items = response.items[:limit]
        return response

    @app.get("/foods/barcode/{code}")
    async def lookup_barcode(code: str, request: Request) -> FoodItemModel:
        """Look a single barcode up."""
        state_container: AppContainer = request.app.state.container
        lookup = await state_container.barcode_service.lookup(code)
        if not lookup.found or lookup.item is None:
            raise HTTPException(
                status_code=_BARCODE_ERRORS.get(lookup.status, HTTPStatus.NOT_FOUND),
                detail=lookup.error or lookup.status.value,
            )
        return FoodItemModel.model_validate(lookup.item)

    @app.websocket("/foods/search/live")
    async def live_search(websocket: WebSocket) -> None:
        """Debounced search driven by keystroke frames from the client."""
        state_container: AppContainer = websocket.app.state.container
        await websocket.accept()
        controller = state_container.new_search_controller()
        outbox: asyncio.Queue[SearchSnapshot] = asyncio.Queue()
        unsubscribe = controller.subscribe(outbox.put_nowait)
        sender = asyncio.create_task(_forward_snapshots(websocket, outbox))
        barcode_tasks: set[asyncio.Task[object]] = set()
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = LiveSearchMessage.model_validate_json(raw)
                except ValidationError:
                    await websocket.send_json({"error": "invalid message"})
                    continue
                _dispatch(controller, message, barcode_tasks)
        except WebSocketDisconnect:
            logger.info("Live search client disconnected")
        finally:
            unsubscribe()
            controller.close()
            for task in (*barcode_tasks, sender):
                task.cancel()
            await asyncio.gather(sender, return_exceptions=True)

    return app


def _dispatch(
    controller: DebouncedSearchController,
    message: LiveSearchMessage,
    barcode_tasks: set[asyncio.Task[object]],
) -> None:
    """Route a client frame to the controller."""
    if message.barcode is not None:
        task = asyncio.create_task(controller.on_barcode_scanned(message.barcode))
        barcode_tasks.add(task)
        task.add_done_callback(barcode_tasks.discard)
    if message.query is not None:
        controller.on_query_changed(message.query)


async def _forward_snapshots(
    websocket: WebSocket, outbox: "asyncio.Queue[SearchSnapshot]"
) -> None:
    while True:
        snapshot = await outbox.get()
        payload = SearchSnapshotModel.model_validate(snapshot)
        await websocket.send_text(payload.model_dump_json())
