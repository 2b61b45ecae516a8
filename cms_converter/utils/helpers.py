"""
Helper Utilities Module.

This module provides common utility functions used throughout the
converter. Functions here should be generic and reusable across
different modules.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - safe_filename: Sanitize filenames for filesystem
    - format_file_size: Human-readable byte counts
"""

import re
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Raises:
        PermissionError: If directory cannot be created due to permissions.

    Example:
        >>> ensure_directory("outputs/messages")
        PosixPath('outputs/messages')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Example:
        >>> get_file_extension("claim.HL7")
        ".hl7"
        >>> get_file_extension("noextension")
        ""
    """
    return Path(filepath).suffix.lower()


def safe_filename(filename: str, replacement: str = "_") -> str:
    """
    Sanitize a filename by removing or replacing invalid characters.

    Args:
        filename: Original filename.
        replacement: Character to replace invalid characters with.

    Returns:
        Sanitized filename safe for filesystem.

    Example:
        >>> safe_filename("claim:123/out.hl7")
        "claim_123_out.hl7"
    """
    # Characters not allowed in Windows filenames
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    sanitized = re.sub(invalid_chars, replacement, filename)

    sanitized = sanitized.strip('. ')

    if not sanitized:
        sanitized = "unnamed"

    return sanitized


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Example:
        >>> format_file_size(1536)
        "1.5 KB"
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"
