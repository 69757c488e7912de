"""
SQLAlchemy ORM models for database tables.

This module contains database table definitions using SQLAlchemy.
For Pydantic request/response schemas, see schemas.py.
"""

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from app.storage import Base


class Message(Base):
    """
    SQLAlchemy model for anonymous messages.

    Table: messages
    Rows are append-only; enrichment sub-records are stored as JSON
    documents written once at creation.
    """
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content = Column(Text, nullable=False)
    ip_address = Column(String, nullable=False)
    location = Column(JSON, nullable=True)
    device_info = Column(JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
