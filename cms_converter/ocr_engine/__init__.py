"""
OCR Engine Module for the CMS-1500 / HL7 Converter.

This module turns uploaded claim documents into text:
    - PDF detection and page rasterization
    - Image loading and preparation
    - Tesseract text recognition per page
"""

from .engine import OCREngine
from .tesseract_backend import TesseractBackend

__all__ = ['OCREngine', 'TesseractBackend']
