# backend/models/stock.py
import enum
from datetime import datetime
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from database import Base

# Direction of a stock movement
class MoveType(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"

# Current quantity of one product. Only the movement service writes to it.
class Stock(Base):
    __tablename__ = "stocks"

    product_id = Column(Integer, ForeignKey("products.id"), primary_key=True)
    quantity = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    product = relationship("Product", back_populates="stock")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stocks_quantity_non_negative"),
    )

# Append-only ledger entry for a single stock movement
class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Always positive; the direction is carried by move_type
    quantity = Column(Integer, nullable=False)
    move_type = Column(Enum(MoveType, name="move_type"), nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    product = relationship("Product")
    user = relationship("User")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_transactions_quantity_positive"),
    )
