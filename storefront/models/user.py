"""User model — store accounts allowed to manage the catalog"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String

from storefront.database import Base
from storefront.models.enums import Role


class User(Base):
    """A back-office user. Email and username are each globally unique."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)                       # bcrypt hash
    role = Column(String(20), nullable=False, default=Role.ADMIN.value)  # ADMIN | SUPER_ADMIN
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
