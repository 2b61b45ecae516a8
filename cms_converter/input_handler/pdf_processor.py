"""
PDF Processor Module.

Rasterizes scanned claim form PDFs into page images for OCR. Uploads
arrive as raw bytes, so documents are opened from memory with PyMuPDF.
"""

import io
from typing import List, Optional

import fitz  # PyMuPDF
from PIL import Image

from config import get_config
from cms_converter.utils.logger import get_logger
from cms_converter.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf(data: bytes) -> bool:
    """Check for the PDF magic bytes."""
    return bool(data) and data[:len(PDF_MAGIC)] == PDF_MAGIC


class PDFProcessor:
    """
    Processor for PDF files.

    Attributes:
        dpi: Resolution for PDF to image conversion
        max_pages: Maximum number of pages to render
        min_bytes: Smallest payload accepted as a PDF

    Example:
        >>> processor = PDFProcessor()
        >>> images = processor.render(pdf_bytes, "claim.pdf")
        >>> print(f"Rendered {len(images)} pages")
    """

    def __init__(
        self,
        dpi: Optional[int] = None,
        max_pages: Optional[int] = None
    ) -> None:
        """Initialize the PDF processor with configuration."""
        self.dpi = dpi or get_config("ocr.pdf.dpi", 300)
        self.max_pages = max_pages or get_config("ocr.pdf.max_pages", 10)
        self.min_bytes = get_config("input.min_pdf_bytes", 100)

        logger.debug(f"PDFProcessor initialized (DPI={self.dpi}, max_pages={self.max_pages})")

    def render(self, data: bytes, name: str = "document.pdf") -> List[Image.Image]:
        """
        Render the pages of a PDF into RGB images.

        Args:
            data: PDF file contents.
            name: Name used in log messages and errors.

        Returns:
            List of PIL Images, at most ``max_pages`` long.

        Raises:
            CorruptedFileError: If the PDF is truncated or cannot be read.
        """
        if len(data) < self.min_bytes:
            raise CorruptedFileError(name, f"only {len(data)} bytes, too small to be a PDF")

        zoom = self.dpi / 72.0
        images = []

        try:
            with fitz.open(stream=data, filetype="pdf") as doc:
                page_count = doc.page_count
                if page_count > self.max_pages:
                    logger.warning(
                        f"PDF has {page_count} pages, limiting to {self.max_pages}"
                    )

                for page_num in range(min(page_count, self.max_pages)):
                    page = doc.load_page(page_num)
                    pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom))
                    image = Image.open(io.BytesIO(pix.tobytes("png")))
                    if image.mode != 'RGB':
                        image = image.convert('RGB')
                    images.append(image)

        except (RuntimeError, ValueError) as e:
            logger.error(f"PyMuPDF conversion failed: {e}")
            raise CorruptedFileError(name, str(e))

        logger.info(f"Converted {name} to {len(images)} image(s)")
        return images
