"""Database tables for stored pages and their version history"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


class Page(SQLModel, table=True):
    """Current reassembled content of a page, keyed by an external document id"""
    __tablename__ = "pages"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    doc_id: str = Field(..., index=True, unique=True, nullable=False)
    content: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))


class PageVersion(SQLModel, table=True):
    """Immutable snapshot of a Page's content before it was overwritten."""
    __tablename__ = "page_versions"
    __table_args__ = (UniqueConstraint("page_id", "version_num", name="uq_pagever_page_num"),)
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    page_id: UUID = Field(..., foreign_key="pages.id", index=True, nullable=False)
    version_num: int = Field(..., nullable=False, description="Monotonically increasing per-page version number")
    content: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
