from pydantic import BaseModel


class InventoryRead(BaseModel):
    s: int = 0
    m: int = 0
    l: int = 0  # noqa: E741
    xl: int = 0
    total: int = 0


class ResetRead(BaseModel):
    ok: bool


class ReconcileRead(BaseModel):
    before: InventoryRead
    after: InventoryRead
    drift: bool
