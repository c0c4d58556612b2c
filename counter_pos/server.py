"""JSON API in front of a local SQLite backend, shared by several terminals."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from counter_pos.backend import LocalBackend
from counter_pos.errors import DuplicateBillNumberError, StorageError, ValidationError
from counter_pos.models import BillRecord

logger = logging.getLogger(__name__)


# -----------------------------
# Request schemas
# -----------------------------
class ItemIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    category: str = ""


class BillItemIn(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    amount: Optional[Decimal] = Field(default=None, ge=0)


class BillIn(BaseModel):
    billNumber: str = Field(..., min_length=1)
    date: str = Field(..., min_length=10, max_length=10)
    time: str = ""
    orderType: str = ""
    cashier: str = ""
    customerName: Optional[str] = ""
    items: List[BillItemIn] = Field(..., min_length=1)
    subtotal: Decimal = Field(..., ge=0)
    cgst: Decimal = Field(default=Decimal("0"), ge=0)
    sgst: Decimal = Field(default=Decimal("0"), ge=0)
    roundOff: Decimal = Decimal("0")
    grandTotal: Decimal = Field(..., ge=0)


class SettingIn(BaseModel):
    value: str


def create_app(backend: LocalBackend) -> FastAPI:
    app = FastAPI(title="counter-pos")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DuplicateBillNumberError)
    async def duplicate_bill(request: Request, exc: DuplicateBillNumberError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"error": str(exc), "billNumber": exc.bill_number, "date": exc.date},
        )

    @app.exception_handler(ValidationError)
    async def invalid_input(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_failed(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("request_failed method=%s path=%s error=%s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # -----------------------------
    # Menu items
    # -----------------------------
    @app.get("/api/items")
    def list_items():
        return [item.to_dict() for item in backend.catalog.list()]

    @app.post("/api/items")
    def create_item(payload: ItemIn):
        return backend.catalog.create(payload.name, payload.price, payload.category).to_dict()

    @app.put("/api/items/{item_id}")
    def update_item(item_id: int, payload: ItemIn):
        try:
            item = backend.catalog.update(item_id, payload.name, payload.price, payload.category)
        except ValidationError as exc:
            return JSONResponse(status_code=404, content={"error": str(exc)})
        return item.to_dict()

    @app.delete("/api/items/{item_id}")
    def delete_item(item_id: int):
        backend.catalog.delete(item_id)
        return {"success": True}

    # -----------------------------
    # Bills
    # -----------------------------
    @app.get("/api/bills")
    def list_bills():
        return [bill.to_dict() for bill in backend.ledger.list_all()]

    @app.post("/api/bills")
    def save_bill(payload: BillIn):
        bill_id = backend.ledger.append(BillRecord.from_dict(payload.model_dump()))
        return {"id": bill_id, "success": True}

    @app.delete("/api/bills")
    def clear_bills(expected: Optional[int] = None):
        removed = backend.ledger.clear_all(expected=expected)
        return {"success": True, "removed": removed}

    # -----------------------------
    # Settings; the fixed routes must precede /api/settings/{key}
    # -----------------------------
    @app.get("/api/settings/bill-number")
    def peek_bill_number():
        return {"billNumber": backend.sequence.peek()}

    @app.post("/api/settings/bill-number")
    def issue_bill_number():
        return {"billNumber": backend.sequence.issue_next()}

    @app.post("/api/settings/reset-bill-number")
    def reset_bill_number():
        backend.sequence.reset()
        return {"success": True}

    @app.get("/api/settings/{key}")
    def get_setting(key: str):
        return {"key": key, "value": backend.database.get_setting(key)}

    @app.post("/api/settings/{key}")
    def set_setting(key: str, payload: SettingIn):
        backend.database.set_setting(key, payload.value)
        return {"key": key, "value": payload.value, "success": True}

    @app.get("/api/health")
    def health():
        try:
            backend.catalog.count()
        except StorageError as exc:
            return JSONResponse(status_code=503, content={"status": "error", "error": str(exc)})
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected",
        }

    return app


def serve(backend: LocalBackend, host: str, port: int) -> None:
    import uvicorn

    logger.info("server_start host=%s port=%d db=%s", host, port, backend.database.path)
    uvicorn.run(create_app(backend), host=host, port=port)
