"""
Date Validators Module.

Validates month/day/year parts recovered from OCR text before they are
accepted into a canonical record.
"""

from datetime import date
from typing import Optional, Tuple

from config import get_config
from cms_converter.utils.logger import get_logger

logger = get_logger(__name__)


class DateValidator:
    """
    Validates date parts captured by heuristic extraction.

    Checks for:
        - Numeric parts
        - Year between MIN_YEAR and the current year
        - A real calendar date

    Example:
        >>> validator = DateValidator()
        >>> validator.validate("02", "29", "2020")
        (True, "Valid date")
        >>> validator.validate("01", "01", "1850")
        (False, "Year 1850 is too old")
    """

    MIN_YEAR = 1900

    def __init__(self, min_year: Optional[int] = None, today: Optional[date] = None) -> None:
        """
        Initialize the date validator.

        Args:
            min_year: Earliest accepted year. Defaults to config.
            today: Reference date for the upper bound. Defaults to today.
        """
        self.min_year = min_year if min_year is not None else \
            get_config("extraction.min_year", self.MIN_YEAR)
        self._today = today

    @property
    def max_year(self) -> int:
        """Latest accepted year (the current year)."""
        return (self._today or date.today()).year

    def is_valid(self, month: str, day: str, year: str) -> bool:
        """Check if the parts form an acceptable date."""
        valid, _ = self.validate(month, day, year)
        return valid

    def validate(self, month: str, day: str, year: str) -> Tuple[bool, str]:
        """
        Validate date parts with detailed feedback.

        Args:
            month: Month part.
            day: Day part.
            year: Four digit year part.

        Returns:
            Tuple of (is_valid, message).
        """
        parts = [str(p) for p in (month, day, year)]
        if not all(p.isascii() and p.isdigit() for p in parts):
            return False, f"Non-numeric date parts: {month}/{day}/{year}"
        m, d, y = (int(p) for p in parts)

        if y < self.min_year:
            return False, f"Year {y} is too old"
        if y > self.max_year:
            return False, f"Year {y} is in the future"

        try:
            date(y, m, d)
        except ValueError as e:
            return False, f"Invalid calendar date: {e}"

        return True, "Valid date"
