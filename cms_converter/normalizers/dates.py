"""
Date Normalizer Module.

The wire format carries dates as fixed-width ``YYYYMMDD`` tokens. Source
values arrive either already in that shape (decoded messages, earlier
normalisation) or as ``M/D/YYYY`` / ``M-D-YYYY`` fragments typed into a
JSON record or recovered from a scanned form. Normalisation therefore
has to be idempotent and lenient: anything it does not recognise becomes
the empty token, which every caller treats as "not populated".
"""

import re
from typing import Union

from cms_converter.utils.logger import get_logger

logger = get_logger(__name__)

DATE_TOKEN_PATTERN = re.compile(r'^\d{8}$', re.ASCII)
SEPARATED_DATE_PATTERN = re.compile(r'^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$', re.ASCII)


class DateNormalizer:
    """
    Converts accepted date shapes into the canonical 8-digit token.

    Accepted shapes:
        - ``YYYYMMDD`` (returned unchanged)
        - ``M/D/YYYY`` and ``M-D-YYYY`` with one or two digit month/day,
          read as month, day, year

    Example:
        >>> normalizer = DateNormalizer()
        >>> normalizer.normalize("1/5/2024")
        "20240105"
        >>> normalizer.normalize("20240105")
        "20240105"
        >>> normalizer.normalize("Jan 5 2024")
        ""
    """

    def normalize(self, raw: str) -> str:
        """
        Normalize a raw date string.

        Args:
            raw: Date text in any shape.

        Returns:
            ``YYYYMMDD`` token, or an empty string when the shape is not
            recognised.
        """
        if not raw:
            return ""

        value = raw.strip()

        if DATE_TOKEN_PATTERN.match(value):
            return value

        match = SEPARATED_DATE_PATTERN.match(value)
        if match:
            month, day, year = match.groups()
            return self.from_parts(month, day, year)

        logger.debug(f"Unrecognised date shape: '{raw}'")
        return ""

    @staticmethod
    def from_parts(
        month: Union[str, int],
        day: Union[str, int],
        year: Union[str, int]
    ) -> str:
        """
        Build a token from separate month, day and year parts.

        Example:
            >>> DateNormalizer.from_parts("3", "7", "1985")
            "19850307"
        """
        return f"{str(year).zfill(4)}{str(month).zfill(2)}{str(day).zfill(2)}"

    @staticmethod
    def to_display(token: str) -> str:
        """
        Render a ``YYYYMMDD`` token as ``MM/DD/YYYY``.

        Values that are not 8-digit tokens are returned unchanged.
        """
        if not token or not DATE_TOKEN_PATTERN.match(token):
            return token
        return f"{token[4:6]}/{token[6:8]}/{token[0:4]}"

    def is_normalized(self, value: str) -> bool:
        """Check if a value already is a canonical date token."""
        return bool(value) and DATE_TOKEN_PATTERN.match(value) is not None


_default_normalizer = DateNormalizer()


def normalize_date(raw: str) -> str:
    """
    Module-level shortcut for :meth:`DateNormalizer.normalize`.

    Used as the ``date`` transform in segment schemas.
    """
    return _default_normalizer.normalize(raw)
