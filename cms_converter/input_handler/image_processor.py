"""
Image Processor Module.

Loads scanned claim form images (JPG, PNG, TIFF, BMP) from raw bytes and
prepares them for OCR:
    - Orientation correction from EXIF data
    - RGB conversion
    - Downscaling of oversized scans
    - Optional contrast enhancement
"""

import io
from typing import Optional

from PIL import Image, ImageOps, ImageEnhance, UnidentifiedImageError

from config import get_config
from cms_converter.utils.logger import get_logger
from cms_converter.utils.exceptions import CorruptedFileError

# Initialize module logger
logger = get_logger(__name__)


class ImageProcessor:
    """
    Processor for image uploads.

    Attributes:
        max_width: Maximum image width in pixels
        max_height: Maximum image height in pixels
        auto_orient: Whether to auto-correct orientation
        enhance_contrast: Whether to apply contrast enhancement

    Example:
        >>> processor = ImageProcessor()
        >>> image = processor.load(png_bytes, "claim.png")
    """

    def __init__(self, enhance_contrast: Optional[bool] = None) -> None:
        """Initialize the image processor with configuration."""
        self.max_width = get_config("ocr.image.max_width", 2550)
        self.max_height = get_config("ocr.image.max_height", 3300)
        self.auto_orient = get_config("ocr.image.auto_orient", True)
        self.enhance_contrast = enhance_contrast if enhance_contrast is not None else \
            get_config("ocr.image.enhance_contrast", False)

        logger.debug(
            f"ImageProcessor initialized (max_size={self.max_width}x{self.max_height})"
        )

    def load(self, data: bytes, name: str = "image") -> Image.Image:
        """
        Decode image bytes and prepare the page for OCR.

        Args:
            data: Image file contents.
            name: Name used in log messages and errors.

        Returns:
            Processed PIL Image.

        Raises:
            CorruptedFileError: If the bytes are not a readable image.
        """
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.error(f"Failed to read image {name}: {e}")
            raise CorruptedFileError(name, str(e))

        original_size = image.size

        if self.auto_orient:
            image = ImageOps.exif_transpose(image)

        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = self._resize_if_needed(image)

        if self.enhance_contrast:
            image = ImageEnhance.Contrast(image).enhance(1.5)

        logger.debug(f"Loaded {name}: {image.width}x{image.height} (original: {original_size})")
        return image

    def _resize_if_needed(self, image: Image.Image) -> Image.Image:
        """Shrink the image to fit within the maximum dimensions."""
        if image.width <= self.max_width and image.height <= self.max_height:
            return image

        scale = min(self.max_width / image.width, self.max_height / image.height)
        new_size = (int(image.width * scale), int(image.height * scale))
        logger.debug(f"Resizing image from {image.size} to {new_size}")
        return image.resize(new_size, Image.LANCZOS)
