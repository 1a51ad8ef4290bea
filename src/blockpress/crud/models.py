"""Database table definitions for posts, reader profiles and login sessions"""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, JSON, String, Text
from sqlmodel import Field, SQLModel

from blockpress.core.models import AccessTier


class Post(SQLModel, table=True):
    """A blog post; content holds the block document exactly as the editor saved it"""
    __tablename__ = "posts"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(..., sa_column=Column(Text, nullable=False))
    author_id: str = Field(..., index=True, nullable=False)
    tier: AccessTier = Field(default=AccessTier.free, nullable=False, description="Access tier chosen by the author")
    content: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    content_hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class Profile(SQLModel, table=True):
    """Reader/author profile; plan decides which posts a reader may list"""
    __tablename__ = "profiles"
    user_id: str = Field(primary_key=True)
    full_name: Optional[str] = Field(default=None)
    avatar_url: Optional[str] = Field(default=None)
    plan: AccessTier = Field(default=AccessTier.free, nullable=False)


class AuthSession(SQLModel, table=True):
    """An issued session token; valid until expires_at"""
    __tablename__ = "auth_sessions"
    token: str = Field(primary_key=True)
    user_id: str = Field(..., index=True, nullable=False)
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    expires_at: datetime = Field(..., sa_column=Column(DateTime(timezone=False), nullable=False))
