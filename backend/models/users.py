# backend/models/users.py
from sqlalchemy import Column, Integer, String, LargeBinary, DateTime, func
from database import Base

# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, default="staff")

    # Optional avatar image, raw bytes
    avatar = Column(LargeBinary, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
