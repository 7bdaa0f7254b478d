from sqlalchemy import Column, Integer, String, Text

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True, index=True)
    hashed_password = Column(Text, nullable=False)
    # 'vendedor' | 'admin'
    role = Column(String, nullable=False, default="vendedor")

    @property
    def to_schema(self):
        """Convert User model to schema dictionary format"""
        return {
            "id": self.id,
            "username": self.username,
        }
