"""
Input Handler Module for the CMS-1500 / HL7 Converter.

This module provides functionality for:
    - Loading and validating input files
    - Classifying inputs as records, messages, text or documents
    - Converting PDFs and images into pages for OCR

Supported formats:
    - JSON records, HL7 messages, plain text
    - PDF and images: JPG, JPEG, PNG, TIFF, BMP
"""

from .handler import InputHandler, InputDocument
from .pdf_processor import PDFProcessor, is_pdf
from .image_processor import ImageProcessor

__all__ = ['InputHandler', 'InputDocument', 'PDFProcessor', 'is_pdf', 'ImageProcessor']
