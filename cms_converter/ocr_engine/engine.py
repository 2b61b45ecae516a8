"""
Main OCR Engine Module.

This module provides the OCREngine class: the single entry point that
turns an uploaded claim document (raw bytes of a PDF or an image) into
the flat text the field extractor works on.

Usage:
    from cms_converter.ocr_engine import OCREngine

    engine = OCREngine()
    text = engine.extract_text(data, "claim.pdf")
"""

import time
from typing import List, Optional

from PIL import Image

from cms_converter.input_handler.image_processor import ImageProcessor
from cms_converter.input_handler.pdf_processor import PDFProcessor, is_pdf
from cms_converter.utils.logger import get_logger
from cms_converter.utils.exceptions import UpstreamServiceFailure
from .tesseract_backend import TesseractBackend

# Initialize module logger
logger = get_logger(__name__)


class OCREngine:
    """
    OCR engine for uploaded claim documents.

    PDFs are detected by their magic bytes and rasterized page by page;
    anything else is decoded as an image. A page that fails recognition
    is skipped with a warning, and the page texts are joined with a
    single space.

    Attributes:
        backend: OCR backend with a ``get_raw_text(image)`` method
        pdf_processor: PDF rasterizer
        image_processor: Image loader

    Example:
        >>> engine = OCREngine()
        >>> text = engine.extract_text(open("claim.pdf", "rb").read())
    """

    def __init__(
        self,
        backend: Optional[TesseractBackend] = None,
        pdf_processor: Optional[PDFProcessor] = None,
        image_processor: Optional[ImageProcessor] = None
    ) -> None:
        """
        Initialize the OCR engine.

        Args:
            backend: OCR backend. If None, Tesseract is used.
            pdf_processor: PDF rasterizer. If None, built from config.
            image_processor: Image loader. If None, built from config.

        Raises:
            OCREngineNotAvailableError: If the Tesseract binary is missing.
        """
        self.backend = backend or TesseractBackend()
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.image_processor = image_processor or ImageProcessor()

        logger.info(f"OCR Engine initialized with backend: {getattr(self.backend, 'name', 'custom')}")

    def load_pages(self, data: bytes, filename: Optional[str] = None) -> List[Image.Image]:
        """
        Turn document bytes into page images.

        Raises:
            CorruptedFileError: If the document cannot be read.
        """
        name = filename or "upload"
        if is_pdf(data):
            return self.pdf_processor.render(data, name)
        return [self.image_processor.load(data, name)]

    def extract_text(self, data: bytes, filename: Optional[str] = None) -> str:
        """
        Recognise the text of a PDF or image document.

        Args:
            data: Document contents.
            filename: Original file name, for messages.

        Returns:
            Text of all readable pages joined with a space.

        Raises:
            CorruptedFileError: If the document cannot be read.
            UpstreamServiceFailure: If no page produced any text.
        """
        start_time = time.time()
        pages = self.load_pages(data, filename)

        texts = []
        for page_num, image in enumerate(pages, start=1):
            try:
                text = self.backend.get_raw_text(image)
            except UpstreamServiceFailure as e:
                logger.warning(f"OCR failed on page {page_num}, skipping: {e}")
                continue
            if text and text.strip():
                texts.append(text.strip())

        if not texts:
            raise UpstreamServiceFailure("ocr", f"no text recognised in {filename or 'upload'}")

        logger.info(
            f"OCR completed: {len(texts)}/{len(pages)} page(s), "
            f"{sum(len(t) for t in texts)} characters ({time.time() - start_time:.2f}s)"
        )
        return " ".join(texts)
