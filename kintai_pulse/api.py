"""FastAPI application exposing the Kintai Pulse REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Awaitable, List, Optional, TypeVar

from fastapi import Depends, FastAPI, Header, HTTPException, Query, status

from .config import Settings, load_settings
from .errors import InvalidQuery, SourceUnavailable, StoreUnwritable
from .service import KintaiService, default_since, parse_since
from .slack_client import SlackChannelSource, SlackClient
from .store import RecordStore

T = TypeVar("T")


async def _guarded(call: Awaitable[T]) -> T:
    try:
        return await call
    except InvalidQuery as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SourceUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except StoreUnwritable as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
        ) from exc


def create_app(
    settings: Optional[Settings] = None, service: Optional[KintaiService] = None
) -> FastAPI:
    settings = settings or load_settings()
    slack_client: Optional[SlackClient] = None
    if service is None:
        slack_client = SlackClient(settings.slack_bot_token)
        service = KintaiService(
            settings,
            RecordStore(settings.store_path),
            SlackChannelSource(slack_client, settings.channel_id),
        )

    async def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")) -> None:
        if x_api_key != settings.api_key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid api key")

    def since_dependency(since: Optional[str] = None) -> datetime:
        if not since:
            return default_since()
        try:
            return parse_since(since)
        except InvalidQuery as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    app = FastAPI(title="Kintai Pulse API", version="1.0.0")

    @app.on_event("shutdown")
    async def shutdown_event() -> None:  # pragma: no cover - io bound
        if slack_client is not None:
            await slack_client.close()

    def get_service() -> KintaiService:
        return service

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/categories")
    async def get_categories(
        _: None = Depends(verify_api_key),
        svc: KintaiService = Depends(get_service),
    ) -> dict[str, object]:
        return {"categories": svc.list_categories()}

    @app.get("/api/records")
    async def get_records(
        author: List[str] = Query(default=[]),
        since: datetime = Depends(since_dependency),
        _: None = Depends(verify_api_key),
        svc: KintaiService = Depends(get_service),
    ) -> dict[str, object]:
        records = await _guarded(svc.get_records_since(since, author))
        return {"since": since.isoformat(), "records": [record.to_dict() for record in records]}

    @app.get("/api/summary")
    async def get_summary(
        author: List[str] = Query(default=[]),
        since: datetime = Depends(since_dependency),
        _: None = Depends(verify_api_key),
        svc: KintaiService = Depends(get_service),
    ) -> dict[str, object]:
        return await _guarded(svc.get_category_summary(since, author))

    @app.post("/api/refresh")
    async def refresh(
        _: None = Depends(verify_api_key),
        svc: KintaiService = Depends(get_service),
    ) -> dict[str, int]:
        total = await _guarded(svc.refresh())
        return {"records": total}

    return app


__all__ = ["create_app"]
