import datetime as dt
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from core.converters import MAX_COUNT, as_count, as_price


SaleType = Literal["mayor", "menor"]
SaleChannel = Literal["wholesale", "retail"]
EggSize = Literal["S", "M", "L", "XL"]


class CollectionCreate(BaseModel):
    date: Optional[dt.date] = None
    s: int = Field(0, le=MAX_COUNT)
    m: int = Field(0, le=MAX_COUNT)
    l: int = Field(0, le=MAX_COUNT)  # noqa: E741
    xl: int = Field(0, le=MAX_COUNT)
    notes: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def _blank_date(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("s", "m", "l", "xl", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return as_count(v)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, v: Any) -> str:
        return "" if v is None else str(v)


class CollectionRead(BaseModel):
    id: int
    date: dt.date
    s: int
    m: int
    l: int  # noqa: E741
    xl: int
    notes: str = ""


class SaleCreate(BaseModel):
    date: Optional[dt.date] = None
    # Left as plain strings; the sales router answers bad values with its own 400 messages.
    type: Optional[str] = None
    size: Optional[str] = None
    quantity: int = Field(0, le=MAX_COUNT)
    price: float = 0
    client: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def _blank_date(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v: Any) -> int:
        # Non-numeric quantities are recorded as 0 rather than rejected.
        return as_count(v)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> float:
        return as_price(v)

    @field_validator("client", mode="before")
    @classmethod
    def _client(cls, v: Any) -> str:
        return "" if v is None else str(v)


class SaleRead(BaseModel):
    id: int
    date: dt.date
    type: Optional[SaleType] = None
    channel: SaleChannel
    size: EggSize
    quantity: int
    price: float
    client: str = ""
