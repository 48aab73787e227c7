from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class TransactionIn(BaseModel):
    type: str
    amount: float
    description: str
    category: str
    date: Optional[str] = None


def create_app(shape: Literal["grouped", "flat"] = "grouped") -> FastAPI:
    """In-memory transaction API; `shape` picks which listing format GET returns"""
    app = FastAPI(title="Mock Transaction Server", version="1.0.0")
    app.state.transactions = {}
    app.state.next_id = 1

    def not_found() -> JSONResponse:
        return JSONResponse(status_code=404, content={"success": False, "message": "Transaction not found"})

    @app.get("/health")
    def health(): return {"status": "ok"}

    @app.get("/api/transactions")
    def list_transactions(request: Request):
        items = list(request.app.state.transactions.values())
        if shape == "flat":
            return {"success": True, "transactions": items}
        return {
            "success": True,
            "transactions": {
                "income": [t for t in items if t["type"] == "income"],
                "expenses": [t for t in items if t["type"] == "expense"],
            },
        }

    @app.post("/api/transactions", status_code=201)
    def create_transaction(body: TransactionIn, request: Request):
        state = request.app.state
        record = {
            "id": state.next_id,
            **body.model_dump(),
            "created_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        state.transactions[state.next_id] = record
        state.next_id += 1
        return {"success": True, "transaction": record}

    @app.put("/api/transactions/{transaction_id}")
    def update_transaction(transaction_id: int, body: TransactionIn, request: Request):
        existing = request.app.state.transactions.get(transaction_id)
        if existing is None:
            return not_found()
        existing.update(body.model_dump())
        return {"success": True, "transaction": existing}

    @app.delete("/api/transactions/{transaction_id}")
    def delete_transaction(transaction_id: int, request: Request):
        if request.app.state.transactions.pop(transaction_id, None) is None:
            return not_found()
        return {"success": True}

    return app


app = create_app()
