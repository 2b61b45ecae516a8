"""
Main Output Handler Module.

This module provides the OutputHandler class that writes conversion
outputs (wire-format messages and canonical record JSON) into the
configured output directory.
"""

from pathlib import Path
from typing import Optional, Union

from config import get_config
from cms_converter.codec.record import CanonicalRecord, dump_record
from cms_converter.utils.logger import get_logger
from cms_converter.utils.helpers import ensure_directory, safe_filename
from cms_converter.utils.exceptions import OutputError

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Writes conversion outputs to disk.

    Attributes:
        output_dir: Directory outputs are written to
        message_filename: Default name for encoded messages
        record_filename: Default name for decoded records

    Example:
        >>> handler = OutputHandler()
        >>> handler.save_message("MSH|^~\\\\&|CMS1500App")
        PosixPath('outputs/converted_from_json.hl7')
        >>> handler.save_record(record, "claim.json")
        PosixPath('outputs/claim.json')
    """

    DEFAULT_MESSAGE_FILENAME = "converted_from_json.hl7"
    DEFAULT_RECORD_FILENAME = "converted_from_hl7.json"

    def __init__(self, output_dir: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the output handler.

        Args:
            output_dir: Override config for the output directory.
        """
        self.output_dir = Path(output_dir or get_config("paths.output_dir", "outputs"))
        self.message_filename = get_config("output.message_filename", self.DEFAULT_MESSAGE_FILENAME)
        self.record_filename = get_config("output.record_filename", self.DEFAULT_RECORD_FILENAME)

        logger.debug(f"OutputHandler initialized (output_dir={self.output_dir})")

    def save_message(self, wire_text: str, filename: Optional[str] = None) -> Path:
        """
        Write a wire-format message.

        Args:
            wire_text: Message text.
            filename: File name. Defaults to the configured message name.

        Returns:
            Path of the written file.
        """
        return self._write(filename or self.message_filename, wire_text)

    def save_record(self, record: CanonicalRecord, filename: Optional[str] = None) -> Path:
        """
        Write a canonical record as JSON.

        Args:
            record: Canonical record.
            filename: File name. Defaults to the configured record name.

        Returns:
            Path of the written file.
        """
        return self._write(filename or self.record_filename, dump_record(record))

    def _write(self, filename: str, content: str) -> Path:
        """
        Write content under the output directory.

        Raises:
            OutputError: If the file cannot be written.
        """
        path = self.output_dir / safe_filename(Path(filename).name)
        try:
            ensure_directory(self.output_dir)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise OutputError(str(path), str(e))

        logger.info(f"Saved output: {path}")
        return path
