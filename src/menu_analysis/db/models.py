"""
Database models for the menu analysis staging store.
"""
from sqlalchemy import Column, Integer, String, Numeric, Float, Date, Time
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class MenuItemRecord(Base):
    """Base table for menu items."""
    __tablename__ = 'menu_items'

    item_id = Column(String(50), primary_key=True)
    item_name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)


class OrderDetailRecord(Base):
    """Base table for order lines."""
    __tablename__ = 'order_details'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_details_id = Column(String(50))
    order_id = Column(String(50), nullable=False)
    order_date = Column(Date, nullable=False)
    order_time = Column(Time, nullable=False)
    item_id = Column(String(50))


class ItemStatRecord(Base):
    """Target table for item statistics."""
    __tablename__ = 'item_stats'

    id = Column(Integer, primary_key=True, autoincrement=True)
    rank = Column(Integer)
    item_id = Column(String(50))
    item_name = Column(String(100))
    category = Column(String(50))
    price = Column(Float)
    times_ordered = Column(Integer)
    total_revenue = Column(Float)


class OrderTotalRecord(Base):
    """Target table for per-order totals."""
    __tablename__ = 'order_totals'

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(50))
    line_count = Column(Integer)
    total_spend = Column(Float)


class CategoryMetricRecord(Base):
    """Target table for menu metrics by category."""
    __tablename__ = 'category_metrics'

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(50))
    item_count = Column(Integer)
    avg_price = Column(Float)
