"""
Database models for datasets and their sales
"""
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid

from app.db.session import Base


class DatasetStatus:
    """Lifecycle states of an uploaded dataset"""
    PROCESSING = "processing"
    READY = "ready"


class Dataset(Base):
    """One uploaded sales file, owned by a business"""
    __tablename__ = "datasets"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    business_id = Column(String(36), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    status = Column(String(20), nullable=False, index=True, default=DatasetStatus.PROCESSING)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    sales = relationship("Sale", back_populates="dataset", passive_deletes=True)

    def __repr__(self):
        return f"<Dataset {self.id}, status={self.status}>"


class Sale(Base):
    """Sale record database model"""
    __tablename__ = "sales"
    __table_args__ = (
        Index("ix_sales_dataset_date", "dataset_id", "date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    dataset_id = Column(String(36), ForeignKey("datasets.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    product = Column(String(200), nullable=True)
    category = Column(String(200), nullable=True)
    customer_id = Column(String(100), nullable=True)

    # Relationships
    dataset = relationship("Dataset", back_populates="sales")

    def __repr__(self):
        return f"<Sale {self.id}, date={self.date}, amount={self.amount}>"
