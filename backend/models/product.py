# backend/models/product.py
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, LargeBinary, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Catalog entry. The current quantity lives in the one-to-one Stock row.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    sku = Column(String, unique=True, nullable=False, index=True)
    brand = Column(String, nullable=True)
    price = Column(Numeric(12, 2), CheckConstraint("price >= 0"), nullable=False, default=0)

    # Optional product photo, raw bytes
    image = Column(LargeBinary, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    category = relationship("Category", back_populates="products")
    stock = relationship("Stock", back_populates="product", uselist=False, cascade="all, delete-orphan")
