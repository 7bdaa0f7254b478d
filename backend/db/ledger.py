from sqlalchemy import Column, Date, Float, Integer, String, Text

from .database import Base

# Wire value used by the sales form -> stored channel
SALE_TYPE_CHANNELS = {"mayor": "wholesale", "menor": "retail"}
CHANNEL_SALE_TYPES = {v: k for k, v in SALE_TYPE_CHANNELS.items()}


class Collection(Base):
    """Eggs gathered on a given day, split by size bucket. Append-only."""
    __tablename__ = "collections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    s = Column(Integer, nullable=False, default=0)
    m = Column(Integer, nullable=False, default=0)
    l = Column(Integer, nullable=False, default=0)  # noqa: E741
    xl = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "date": self.date,
            "s": self.s,
            "m": self.m,
            "l": self.l,
            "xl": self.xl,
            "notes": self.notes or "",
        }


class Sale(Base):
    """Eggs sold from a single size bucket. Append-only."""
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    # 'wholesale' | 'retail'
    channel = Column(String, nullable=False)
    # 'S' | 'M' | 'L' | 'XL'
    size = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0)
    client = Column(Text, nullable=False, default="")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "date": self.date,
            "type": CHANNEL_SALE_TYPES.get(self.channel),
            "channel": self.channel,
            "size": self.size,
            "quantity": self.quantity,
            "price": float(self.price or 0),
            "client": self.client or "",
        }
