"""
Database models for the price research system.
SQLAlchemy tables for processes, items and quotes plus their pydantic record
models shared by both storage backends.
"""

from datetime import datetime, date
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, String, Float, DateTime, Date, Boolean, Text, ForeignKey, Index
from sqlalchemy.orm import declarative_base, relationship

from utils.date_utils import get_local_time

Base = declarative_base()


class ProcessDB(Base):
    """Procurement case"""
    __tablename__ = 'processes'

    id = Column(Integer, primary_key=True, autoincrement=True)
    process_number = Column(String(64), nullable=False)
    object = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=get_local_time, index=True)

    items = relationship("ItemDB", back_populates="process", cascade="all, delete-orphan", passive_deletes=True)


class ItemDB(Base):
    """Line item of a process"""
    __tablename__ = 'items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    process_id = Column(Integer, ForeignKey('processes.id', ondelete='CASCADE'), nullable=False, index=True)
    item_number = Column(Integer, nullable=False)
    specification = Column(Text, nullable=False)
    unit = Column(String(32), nullable=False, default='UN')
    quantity = Column(Float, nullable=False)
    pricing_strategy = Column(String(16), nullable=False, default='sanitized')

    process = relationship("ProcessDB", back_populates="items")
    quotes = relationship("QuoteDB", back_populates="item", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index('idx_items_process_number', 'process_id', 'item_number'),
    )


class QuoteDB(Base):
    """Supplier unit price for an item"""
    __tablename__ = 'quotes'

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey('items.id', ondelete='CASCADE'), nullable=False, index=True)
    source = Column(String(255), nullable=False)
    quote_date = Column(Date, nullable=False)
    unit_price = Column(Float, nullable=False)
    quote_type = Column(String(16), nullable=False, default='private')
    is_outlier = Column(Boolean, nullable=False, default=False)  # legacy, not used by statistics

    item = relationship("ItemDB", back_populates="quotes")

    __table_args__ = (
        Index('idx_quotes_item_date', 'item_id', 'quote_date'),
    )


class Process(BaseModel):
    """Process record"""
    id: int
    process_number: str
    object: str
    created_at: datetime

    class Config:
        from_attributes = True


class Item(BaseModel):
    """Item record"""
    id: int
    process_id: int
    item_number: int
    specification: str
    unit: str = "UN"
    quantity: float
    pricing_strategy: str = "sanitized"

    class Config:
        from_attributes = True


class Quote(BaseModel):
    """Quote record"""
    id: int
    item_id: int
    source: str
    quote_date: date
    unit_price: float
    quote_type: str = "private"
    is_outlier: bool = False

    class Config:
        from_attributes = True


class HistoryEntry(Item):
    """Item joined with its process"""
    process_number: str
    object: str
    process_created_at: Optional[datetime] = Field(None, description="Creation time of the owning process")
