"""
Main Input Handler Module.

This module provides the InputHandler class that loads converter inputs
from disk and classifies them by what the converter does with them:

    record    .json          canonical record to encode
    message   .hl7           wire-format message to decode
    text      .txt           key/value form text or raw OCR text
    document  .pdf, images   scanned claim form for OCR

Usage:
    from cms_converter.input_handler import InputHandler

    handler = InputHandler()
    document = handler.load("claim.pdf")
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

from config import get_config
from cms_converter.utils.logger import get_logger
from cms_converter.utils.helpers import format_file_size, get_file_extension
from cms_converter.utils.exceptions import (
    InputError,
    UnsupportedFileTypeError,
    MissingFileError,
    CorruptedFileError
)

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class InputDocument:
    """
    A loaded input file.

    Attributes:
        filepath: Original file path
        filename: Original filename
        kind: One of 'record', 'message', 'text', 'document'
        data: Raw file contents
        text: Decoded contents for textual kinds, else None
        metadata: Additional file metadata
    """
    filepath: str
    filename: str
    kind: str
    data: bytes
    text: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"InputDocument(filename='{self.filename}', "
            f"kind='{self.kind}', "
            f"size={len(self.data)})"
        )


class InputHandler:
    """
    Loads and validates converter input files.

    Attributes:
        max_file_size: Largest accepted file in bytes
        encoding: Text encoding of textual inputs

    Example:
        >>> handler = InputHandler()
        >>> document = handler.load("claim.hl7")
        >>> document.kind
        'message'
    """

    # Supported file extensions per kind
    KIND_EXTENSIONS = {
        'record': {'.json'},
        'message': {'.hl7'},
        'text': {'.txt'},
        'document': {'.pdf', '.jpg', '.jpeg', '.png', '.tiff', '.tif', '.bmp'},
    }

    TEXT_KINDS = {'record', 'message', 'text'}

    def __init__(self, max_file_size: Optional[int] = None) -> None:
        """
        Initialize the InputHandler.

        Args:
            max_file_size: Size limit in bytes. If None, uses config.
        """
        self.max_file_size = max_file_size or get_config("input.max_file_size", 10 * 1024 * 1024)
        self.encoding = get_config("input.encoding", "utf-8")

        logger.debug(f"InputHandler initialized (max size {format_file_size(self.max_file_size)})")

    @property
    def supported_extensions(self) -> set:
        """Every accepted extension."""
        return set().union(*self.KIND_EXTENSIONS.values())

    def detect_kind(self, filepath: Union[str, Path]) -> str:
        """
        Classify a file by its extension.

        Args:
            filepath: Path to the file.

        Returns:
            Kind string.

        Raises:
            UnsupportedFileTypeError: If the extension is not supported.
        """
        extension = get_file_extension(filepath)
        for kind, extensions in self.KIND_EXTENSIONS.items():
            if extension in extensions:
                return kind
        raise UnsupportedFileTypeError(extension or '(none)', sorted(self.supported_extensions))

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, is supported and has a sane size.

        Raises:
            MissingFileError: If file doesn't exist.
            UnsupportedFileTypeError: If file type is not supported.
            CorruptedFileError: If the file is empty or too large.
        """
        path = Path(filepath)

        if not path.exists():
            raise MissingFileError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        self.detect_kind(path)

        size = path.stat().st_size
        if size == 0:
            raise CorruptedFileError(str(filepath), "File is empty")
        if size > self.max_file_size:
            raise CorruptedFileError(
                str(filepath),
                f"File is {format_file_size(size)}, limit is {format_file_size(self.max_file_size)}"
            )

        logger.debug(f"File validated: {filepath}")
        return path

    def load(self, filepath: Union[str, Path]) -> InputDocument:
        """
        Load an input file.

        Args:
            filepath: Path to the file.

        Returns:
            InputDocument with raw bytes, and text for textual kinds.

        Raises:
            InputError: If the file is missing, unsupported or unreadable.
        """
        logger.info(f"Loading file: {filepath}")

        path = self.validate_file(filepath)
        kind = self.detect_kind(path)
        data = path.read_bytes()

        text = None
        if kind in self.TEXT_KINDS:
            try:
                text = data.decode(self.encoding)
            except UnicodeDecodeError as e:
                raise CorruptedFileError(str(filepath), f"not valid {self.encoding} text: {e}")

        document = InputDocument(
            filepath=str(filepath),
            filename=path.name,
            kind=kind,
            data=data,
            text=text,
            metadata={'file_size_bytes': len(data), 'extension': get_file_extension(path)}
        )

        logger.info(f"Loaded {document.filename} as {kind} ({format_file_size(len(data))})")
        return document
