from __future__ import annotations

from typing import Any, Dict, List, Optional

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..config import load_remote
from ..logging import get_logger
from ..remote.client import RemoteDataClient, RemoteDataError
from ..store import service
from ..store.constants import EXPORT_FILENAME
from ..store.db import LocalStoreError
from ..store.models import ParcelSubmission
from ..store.suggest import suggest
from ..store.sync import record_parcel_submission, refresh_customers, refresh_vocabularies


LOG = get_logger("localdb-api")


async def _read_json(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Request body must be JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return payload


def _require_str(payload: Dict[str, Any], key: str, *, allow_empty: bool = False) -> str:
    value = payload.get(key)
    if value is None or (not allow_empty and value == ""):
        raise HTTPException(status_code=400, detail=f"Missing field: {key}")
    return str(value)


async def _store_error(_: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"detail": f"Local store error: {exc}"}, status_code=500)


async def _remote_error(_: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"detail": f"Remote refresh failed: {exc}"}, status_code=502)


def create_app(
    db_path: Optional[str] = None,
    *,
    remote: Optional[RemoteDataClient] = None,
    allow_origins: Optional[List[str]] = None,
) -> Starlette:
    """Create a Starlette app exposing the local suggestion store as JSON."""

    service.open_store(db_path)

    if remote is None:
        remote_cfg = load_remote()
        if remote_cfg is not None:
            remote = RemoteDataClient(*remote_cfg)
    if remote is None:
        LOG.info("No remote backend configured; refresh endpoints disabled.")

    def _remote() -> RemoteDataClient:
        if remote is None:
            raise HTTPException(status_code=503, detail="Remote backend not configured")
        return remote

    async def health(_: Request) -> JSONResponse:
        db = await service.get_store()
        return JSONResponse({"status": "ok", "db_path": db.db_path})

    async def customers(request: Request) -> JSONResponse:
        search = request.query_params.get("search") or None
        if search:
            rows = await service.filter_customers(search)
        else:
            rows = await service.get_all_customers()
        return JSONResponse({"total": len(rows), "items": [c.to_dict() for c in rows]})

    async def customer_detail(request: Request) -> JSONResponse:
        customer = await service.get_customer_by_mobile(request.path_params["mobile_no"])
        if customer is None:
            raise HTTPException(status_code=404, detail="Customer not found")
        return JSONResponse(customer.to_dict())

    async def upsert_customer(request: Request) -> JSONResponse:
        payload = await _read_json(request)
        mobile_no = _require_str(payload, "mobile_no")
        name = payload.get("customer_name")
        customer = await service.upsert_customer(None if name is None else str(name), mobile_no)
        return JSONResponse(customer.to_dict())

    async def descriptions(request: Request) -> JSONResponse:
        if request.method == "POST":
            payload = await _read_json(request)
            await service.add_description(_require_str(payload, "text", allow_empty=True))
        items = await service.get_all_descriptions()
        return JSONResponse({"total": len(items), "items": items})

    async def remarks(request: Request) -> JSONResponse:
        if request.method == "POST":
            payload = await _read_json(request)
            await service.add_remark(_require_str(payload, "text", allow_empty=True))
        items = await service.get_all_remarks()
        return JSONResponse({"total": len(items), "items": items})

    async def suggestions(request: Request) -> JSONResponse:
        field = request.path_params["field"]
        value = request.query_params.get("q") or ""
        try:
            items = await suggest(field, value)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return JSONResponse({"field": field, "items": items})

    async def submissions(request: Request) -> JSONResponse:
        payload = await _read_json(request)
        remark = payload.get("remark")
        submission = ParcelSubmission(
            sender_name=_require_str(payload, "sender_name"),
            sender_mobile=_require_str(payload, "sender_mobile"),
            receiver_name=_require_str(payload, "receiver_name"),
            receiver_mobile=_require_str(payload, "receiver_mobile"),
            description=_require_str(payload, "description"),
            remark=None if remark is None else str(remark),
        )
        await record_parcel_submission(submission)
        return JSONResponse({"status": "recorded"}, status_code=201)

    async def refresh_customers_endpoint(_: Request) -> JSONResponse:
        count = await refresh_customers(_remote())
        return JSONResponse({"customers": count})

    async def refresh_vocabularies_endpoint(_: Request) -> JSONResponse:
        described, remarked = await refresh_vocabularies(_remote())
        return JSONResponse({"descriptions": described, "remarks": remarked})

    async def export(_: Request) -> Response:
        body = await service.export_all()
        return Response(
            body,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    routes = [
        Route("/api/health", health, methods=["GET"]),
        Route("/api/customers", customers, methods=["GET"]),
        Route("/api/customers", upsert_customer, methods=["PUT"]),
        Route("/api/customers/{mobile_no:str}", customer_detail, methods=["GET"]),
        Route("/api/descriptions", descriptions, methods=["GET", "POST"]),
        Route("/api/remarks", remarks, methods=["GET", "POST"]),
        Route("/api/suggestions/{field:str}", suggestions, methods=["GET"]),
        Route("/api/submissions", submissions, methods=["POST"]),
        Route("/api/refresh/customers", refresh_customers_endpoint, methods=["POST"]),
        Route("/api/refresh/vocabularies", refresh_vocabularies_endpoint, methods=["POST"]),
        Route("/api/export", export, methods=["GET"]),
    ]

    app = Starlette(
        debug=False,
        routes=routes,
        exception_handlers={
            LocalStoreError: _store_error,
            RemoteDataError: _remote_error,
        },
    )

    origins = allow_origins or ["http://localhost:5173", "http://127.0.0.1:5173"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if "*" in origins else origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


__all__ = ["create_app"]
