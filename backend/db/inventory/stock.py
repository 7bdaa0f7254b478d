from sqlalchemy import CheckConstraint, Column, Integer

from ..database import Base

INVENTORY_ROW_ID = 1


class InventoryStock(Base):
    __tablename__ = "inventory"
    __table_args__ = (CheckConstraint("id = 1", name="ck_inventory_single_row"),)

    id = Column(Integer, primary_key=True, autoincrement=False, default=INVENTORY_ROW_ID)

    s = Column(Integer, nullable=False, default=0)
    m = Column(Integer, nullable=False, default=0)
    l = Column(Integer, nullable=False, default=0)  # noqa: E741
    xl = Column(Integer, nullable=False, default=0)
    total = Column(Integer, nullable=False, default=0)

    @property
    def to_schema(self):
        return {
            "s": int(self.s or 0),
            "m": int(self.m or 0),
            "l": int(self.l or 0),
            "xl": int(self.xl or 0),
            "total": int(self.total or 0),
        }
