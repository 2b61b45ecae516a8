"""
Tesseract OCR Backend.

This module provides OCR functionality using Tesseract (pytesseract).
Claim extraction works on the flat page text, so only plain text
recognition is exposed.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package
"""

import time

import pytesseract
from PIL import Image

from config import get_config
from cms_converter.utils.logger import get_logger
from cms_converter.utils.exceptions import OCREngineNotAvailableError, UpstreamServiceFailure

# Initialize module logger
logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR backend implementation.

    Uses pytesseract to turn page images into text. Tesseract must be
    installed on the system for this to work.

    Attributes:
        language: Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration

    Example:
        >>> backend = TesseractBackend()
        >>> text = backend.get_raw_text(image)
    """

    name = "tesseract"

    def __init__(self) -> None:
        """Initialize the Tesseract backend with configuration."""
        self.language = get_config("ocr.tesseract.lang", "eng")
        self.psm = get_config("ocr.tesseract.psm", 3)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")

        self.version = self._check_binary()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_binary(self) -> str:
        """
        Check that the Tesseract binary can be run.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not installed.
        """
        try:
            version = str(pytesseract.get_tesseract_version())
        except pytesseract.TesseractNotFoundError:
            raise OCREngineNotAvailableError(self.name)
        logger.info(f"Tesseract version: {version}")
        return version

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def get_raw_text(self, image: Image.Image) -> str:
        """
        Recognise the text of one page image.

        Args:
            image: PIL Image to process.

        Returns:
            Recognised text (may be empty).

        Raises:
            UpstreamServiceFailure: If Tesseract fails on the image.
        """
        start_time = time.time()

        if image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')

        try:
            text = pytesseract.image_to_string(
                image,
                lang=self.language,
                config=self._build_config()
            )
        except pytesseract.TesseractError as e:
            raise UpstreamServiceFailure(self.name, str(e))

        logger.debug(f"Recognised {len(text)} characters in {time.time() - start_time:.2f}s")
        return text
