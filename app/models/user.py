"""
User database model.

Owner of workout sessions and routines.  Authentication is handled
outside this service; only the identity is stored here.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.dates import timestamp_column, utcnow


class User(SQLModel, table=True):
    """
    User model.

    Every session, set and routine belongs to exactly one user.
    """
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255, nullable=False)

    # Profile
    full_name: Optional[str] = Field(default=None, max_length=255)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
