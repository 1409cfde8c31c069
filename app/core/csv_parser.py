"""
CSV ingestion for uploaded sales files.

Turns raw CSV text into normalized SaleRecord objects ready for bulk
insertion. Header names are matched loosely (case, spaces and underscores
are ignored) and several synonyms are accepted for each field. Rows with a
missing date or an unusable amount are dropped without error; only a file
with no usable rows at all is rejected.
"""

import csv
import io
import logging
import math
import re
from datetime import date
from typing import Dict, List, Optional, Sequence

from app.core.exceptions import EmptyFileError, MissingColumnsError, NoValidRowsError
from app.core.schemas import SaleRecord

# Set up logging
logger = logging.getLogger(__name__)

DATE_COLUMNS = ("date",)
AMOUNT_COLUMNS = ("amount", "revenue", "total")
PRODUCT_COLUMNS = ("product", "productname", "item")
CATEGORY_COLUMNS = ("category", "type")
CUSTOMER_COLUMNS = ("customerid", "customer")

_HEADER_STRIP = re.compile(r"[\s_]+")
_CURRENCY_CHARS = re.compile(r"[$,]")
_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_ISO_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[T ].*)?$")
_DIGIT_GROUP = re.compile(r"^\d{3}(\.\d*)?$")


def normalize_header(header: str) -> str:
    """
    Canonical form of a header cell.

    "Customer ID", "customer_id" and "customerid" all become "customerid".
    """
    return _HEADER_STRIP.sub("", header.lstrip("\ufeff").strip().lower())


def parse_amount(raw: Optional[str]) -> Optional[float]:
    """
    Parse a monetary cell such as "$1,200.50".

    Returns None when the cell is blank, not a number, not finite or negative.
    """
    if raw is None:
        return None
    cleaned = _CURRENCY_CHARS.sub("", raw).strip()
    if not cleaned or not _NUMBER.match(cleaned):
        return None
    value = float(cleaned)
    if not math.isfinite(value) or value < 0:
        return None
    return value


def parse_date(raw: Optional[str]) -> Optional[date]:
    """Parse an ISO calendar date, ignoring any trailing time part."""
    if raw is None:
        return None
    match = _ISO_DATE.match(raw.strip())
    if not match:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


class ColumnMap:
    """
    Resolves field synonyms against a normalized header row.

    Positions are kept in synonym priority order so a row can fall back
    to the next synonym when the preferred cell is blank.
    """

    def __init__(self, header: Sequence[str]):
        self.header = [normalize_header(h) for h in header]
        self.width = len(self.header)

        positions: Dict[str, int] = {}
        for idx, name in enumerate(self.header):
            # First column wins when two headers normalize to the same name
            positions.setdefault(name, idx)

        self.date = self._resolve(positions, DATE_COLUMNS)
        self.amount = self._resolve(positions, AMOUNT_COLUMNS)
        self.product = self._resolve(positions, PRODUCT_COLUMNS)
        self.category = self._resolve(positions, CATEGORY_COLUMNS)
        self.customer = self._resolve(positions, CUSTOMER_COLUMNS)

    @staticmethod
    def _resolve(positions: Dict[str, int], synonyms: Sequence[str]) -> List[int]:
        return [positions[name] for name in synonyms if name in positions]

    def missing_required(self) -> List[str]:
        missing = []
        if not self.date:
            missing.append("date")
        if not self.amount:
            missing.append("amount")
        return missing

    def repair(self, row: List[str]) -> List[str]:
        """
        Fit a row with surplus cells back to the header width.

        An unquoted amount like $1,000.00 splits into "$1" and "000.00";
        when the surplus cells right after the amount are all three-digit
        groups they are joined back into the amount. Other surplus cells
        are dropped.
        """
        surplus = len(row) - self.width
        if surplus <= 0:
            return row

        if self.amount:
            pos = self.amount[0]
            tail = row[pos + 1:pos + 1 + surplus]
            if row[pos].strip() and tail and all(_DIGIT_GROUP.match(cell.strip()) for cell in tail):
                merged = ",".join([row[pos]] + tail)
                return row[:pos] + [merged] + row[pos + 1 + surplus:]

        return row[:self.width]

    @staticmethod
    def first_value(row: Sequence[str], positions: Sequence[int]) -> Optional[str]:
        """Return the first non-blank cell among the given positions, stripped."""
        for pos in positions:
            if pos < len(row):
                value = row[pos].strip()
                if value:
                    return value
        return None


def _is_blank_line(row: Sequence[str]) -> bool:
    return not row or (len(row) == 1 and not row[0].strip())


def normalize_row(row: List[str], columns: ColumnMap, dataset_id: str) -> Optional[SaleRecord]:
    """
    Build a SaleRecord from one tokenized data row.

    Returns None when the row has no usable date or amount.
    """
    row = columns.repair(row)

    sale_date = parse_date(columns.first_value(row, columns.date))
    if sale_date is None:
        return None

    amount = parse_amount(columns.first_value(row, columns.amount))
    if amount is None:
        return None

    return SaleRecord(
        dataset_id=dataset_id,
        date=sale_date,
        amount=amount,
        product=columns.first_value(row, columns.product),
        category=columns.first_value(row, columns.category),
        customer_id=columns.first_value(row, columns.customer),
    )


def parse_and_validate(csv_text: str, dataset_id: str) -> List[SaleRecord]:
    """
    Parse and validate raw CSV text into normalized sale records.

    Args:
        csv_text: Full content of the uploaded file
        dataset_id: Dataset identifier stamped onto every record

    Returns:
        List[SaleRecord]: Valid records in input order

    Raises:
        EmptyFileError: No data rows after the header
        MissingColumnsError: No date column or no amount column
        NoValidRowsError: Every data row was dropped
    """
    reader = csv.reader(io.StringIO(csv_text, newline=""))

    columns: Optional[ColumnMap] = None
    records: List[SaleRecord] = []
    total_rows = 0

    for row in reader:
        if _is_blank_line(row):
            continue

        if columns is None:
            columns = ColumnMap(row)
            continue

        if total_rows == 0:
            missing = columns.missing_required()
            if missing:
                logger.warning(f"CSV for dataset {dataset_id} is missing columns: {missing}")
                raise MissingColumnsError(missing, found=columns.header)

        total_rows += 1
        record = normalize_row(row, columns, dataset_id)
        if record is not None:
            records.append(record)

    if total_rows == 0:
        raise EmptyFileError()

    skipped = total_rows - len(records)
    if skipped:
        logger.debug(f"Skipped {skipped} of {total_rows} rows for dataset {dataset_id}")

    if not records:
        raise NoValidRowsError(total_rows)

    logger.info(f"Parsed {len(records)} sales rows for dataset {dataset_id}")
    return records
