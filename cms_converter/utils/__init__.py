"""
Utility Module for the CMS-1500 / HL7 Converter.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File helpers
"""

from .logger import setup_logger, get_logger
from .helpers import ensure_directory, get_file_extension, safe_filename

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
    'safe_filename'
]
