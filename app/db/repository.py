from typing import List, Dict, Any, Optional, TypeVar, Generic, Type, Sequence, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session
import logging
from datetime import date

from ..models.models import Dataset, DatasetStatus, Sale
from .session import Base

# Setup logging
logger = logging.getLogger(__name__)

# Generic type for SQLAlchemy models
T = TypeVar('T', bound=Base)

class Repository(Generic[T]):
    """
    Generic repository for basic database operations.

    Subclasses add the queries specific to their model.
    """

    def __init__(self, model: Type[T]):
        """
        Initialize the repository with the SQLAlchemy model.

        Args:
            model: SQLAlchemy model class
        """
        self.model = model

    def create(self, session: Session, obj_in: Dict[str, Any]) -> T:
        """
        Create a new database record.

        Args:
            session: SQLAlchemy session
            obj_in: Dictionary containing the object data

        Returns:
            T: Created database object
        """
        db_obj = self.model(**obj_in)
        session.add(db_obj)
        session.flush()
        session.refresh(db_obj)
        return db_obj

    def get(self, session: Session, id: Any) -> Optional[T]:
        """
        Get an object by ID.

        Args:
            session: SQLAlchemy session
            id: Object ID

        Returns:
            Optional[T]: Retrieved object or None if not found
        """
        return session.query(self.model).filter(self.model.id == id).first()


class DatasetRepository(Repository[Dataset]):
    """Repository for uploaded datasets."""

    def __init__(self):
        super().__init__(Dataset)

    def get_ready(self, session: Session, dataset_id: str) -> Optional[Dataset]:
        """Get a dataset only once its upload has completed."""
        return (
            session.query(Dataset)
            .filter(Dataset.id == dataset_id, Dataset.status == DatasetStatus.READY)
            .first()
        )

    def list_with_counts(self, session: Session, business_id: Optional[str] = None) -> List[Tuple[Dataset, int]]:
        """
        List ready datasets with their sale counts, newest first.

        Args:
            session: SQLAlchemy session
            business_id: Restrict to one business when given

        Returns:
            List[Tuple[Dataset, int]]: Datasets paired with row counts
        """
        row_count = func.count(Sale.id).label("rows_count")
        query = (
            session.query(Dataset, row_count)
            .outerjoin(Sale, Sale.dataset_id == Dataset.id)
            .filter(Dataset.status == DatasetStatus.READY)
        )
        if business_id:
            query = query.filter(Dataset.business_id == business_id)

        query = query.group_by(Dataset.id).order_by(Dataset.created_at.desc())
        return [(dataset, int(count or 0)) for dataset, count in query.all()]

    def status_counts(self, session: Session) -> Dict[str, int]:
        """Number of datasets per lifecycle status."""
        rows = session.query(Dataset.status, func.count(Dataset.id)).group_by(Dataset.status).all()
        return {status: int(count) for status, count in rows}

    def mark_ready(self, session: Session, dataset_id: str) -> None:
        session.query(Dataset).filter(Dataset.id == dataset_id).update(
            {"status": DatasetStatus.READY}, synchronize_session=False
        )

    def delete(self, session: Session, dataset_id: str) -> bool:
        """
        Delete a dataset and all of its sales.

        Returns:
            bool: False when the dataset does not exist
        """
        # Sales are removed explicitly; SQLite does not enforce ON DELETE by default
        session.query(Sale).filter(Sale.dataset_id == dataset_id).delete(synchronize_session=False)
        deleted = session.query(Dataset).filter(Dataset.id == dataset_id).delete(synchronize_session=False)
        return deleted > 0


class SaleRepository(Repository[Sale]):
    """
    Repository for sale rows.

    The range queries take an inclusive [start, end] date window; either
    bound may be omitted.
    """

    def __init__(self):
        super().__init__(Sale)

    def bulk_insert(self, session: Session, rows: Sequence[Dict[str, Any]]) -> int:
        """Insert a batch of sale rows. Returns the number of rows inserted."""
        if not rows:
            return 0
        session.bulk_insert_mappings(Sale, list(rows))
        session.flush()
        return len(rows)

    def list_for_dataset(self, session: Session, dataset_id: str) -> List[Sale]:
        """All sales of a dataset in insertion order."""
        return (
            session.query(Sale)
            .filter(Sale.dataset_id == dataset_id)
            .order_by(Sale.id)
            .all()
        )

    def latest_date(self, session: Session, dataset_id: str) -> Optional[date]:
        return session.query(func.max(Sale.date)).filter(Sale.dataset_id == dataset_id).scalar()

    def _in_range(self, query, dataset_id: str, start: Optional[date], end: Optional[date]):
        query = query.filter(Sale.dataset_id == dataset_id)
        if start:
            query = query.filter(Sale.date >= start)
        if end:
            query = query.filter(Sale.date <= end)
        return query

    def daily_revenue(
        self, session: Session, dataset_id: str,
        start: Optional[date] = None, end: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> List[Tuple[date, float]]:
        """
        Revenue per calendar date, ascending.

        With ``limit`` only the most recent ``limit`` dates are returned,
        still in ascending order.
        """
        revenue = func.sum(Sale.amount).label("revenue")
        query = self._in_range(session.query(Sale.date, revenue), dataset_id, start, end)
        query = query.group_by(Sale.date)

        if limit:
            rows = query.order_by(Sale.date.desc()).limit(limit).all()
            rows.reverse()
        else:
            rows = query.order_by(Sale.date.asc()).all()

        return [(row.date, float(row.revenue or 0.0)) for row in rows]

    def revenue_by_label(
        self, session: Session, dataset_id: str, column: str,
        start: Optional[date] = None, end: Optional[date] = None,
    ) -> List[Tuple[Optional[str], float]]:
        """
        Revenue per product or category label, descending.

        Blank labels are returned as None; the caller folds them into one key.
        """
        label = getattr(Sale, column)
        revenue = func.sum(Sale.amount).label("revenue")
        query = self._in_range(session.query(label, revenue), dataset_id, start, end)
        query = query.group_by(label).order_by(revenue.desc())
        return [(name, float(total or 0.0)) for name, total in query.all()]

    def totals(
        self, session: Session, dataset_id: str,
        start: Optional[date] = None, end: Optional[date] = None,
    ) -> Tuple[float, int]:
        """Total revenue and order count inside the window."""
        query = self._in_range(
            session.query(func.coalesce(func.sum(Sale.amount), 0.0), func.count(Sale.id)),
            dataset_id, start, end,
        )
        total, count = query.one()
        return float(total or 0.0), int(count or 0)
