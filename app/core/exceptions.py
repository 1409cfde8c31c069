"""
Errors raised while ingesting an uploaded sales file.

All of them are terminal for the upload: the caller discards the attempt
and shows the message to the user.
"""

from typing import List, Optional


class CsvValidationError(ValueError):
    """Base class for user-facing CSV ingestion failures."""

    error_code = "csv_invalid"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingColumnsError(CsvValidationError):
    """The header lacks a date column or every amount column."""

    error_code = "missing_columns"

    def __init__(self, missing: List[str], found: Optional[List[str]] = None):
        self.missing = list(missing)
        self.found = list(found or [])
        super().__init__(
            f"CSV must contain 'date' and 'amount' columns. Missing: {', '.join(self.missing)}"
        )


class EmptyFileError(CsvValidationError):
    """No data rows after the header."""

    error_code = "empty_file"

    def __init__(self, message: str = "CSV is empty"):
        super().__init__(message)


class NoValidRowsError(CsvValidationError):
    """Every data row was dropped during normalization."""

    error_code = "no_valid_rows"

    def __init__(self, total_rows: int = 0):
        self.total_rows = total_rows
        super().__init__("No valid rows found. Check date/amount formats.")
