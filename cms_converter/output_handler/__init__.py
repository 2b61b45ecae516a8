"""
Output Handler Module for the CMS-1500 / HL7 Converter.

This module provides functionality for:
    - Writing encoded messages
    - Writing decoded records as JSON
"""

from .handler import OutputHandler

__all__ = ['OutputHandler']
