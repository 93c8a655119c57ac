import os
from pathlib import Path
from typing import Optional

import fitz  # PyMuPDF
import pytesseract
from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from agentvista.config import Config
from agentvista.errors import TextExtractionError, UnsupportedFileTypeError
from agentvista.logger import get_logger

logger = get_logger(__name__)

OCR_MAX_SIDE = 1600
OCR_CONFIG = '--psm 3'


def detect_extension(file_path: str, original_filename: Optional[str] = None) -> str:
    """Extension from the uploaded filename first, then from the stored path"""
    extension = ''
    if original_filename:
        extension = Path(original_filename).suffix.lower()
    if not extension:
        extension = Path(file_path).suffix.lower()
    return extension


class TextExtractionService:
    """Plain text from listing PDFs and photographed/scanned images"""

    def __init__(self, supported_formats=None):
        self.supported_formats = supported_formats or Config.SUPPORTED_DOCUMENT_FORMATS

    def extract_text(self, file_path: str, original_filename: Optional[str] = None) -> str:
        extension = detect_extension(file_path, original_filename)

        if not extension:
            logger.info("No file extension detected, attempting image processing...")
            return self.extract_text_from_image(file_path)

        if extension not in self.supported_formats:
            raise UnsupportedFileTypeError(extension, self.supported_formats)

        if extension == '.pdf':
            text = self.extract_text_from_pdf(file_path)
        else:
            text = self.extract_text_from_image(file_path)

        logger.info(f"Extracted text length: {len(text)} characters")
        return text

    def extract_text_from_pdf(self, file_path: str) -> str:
        try:
            with fitz.open(file_path) as doc:
                logger.info(f"PDF processed: {doc.page_count} pages")
                return "\n".join(page.get_text() for page in doc)
        except (fitz.FileDataError, OSError, RuntimeError, ValueError) as e:
            raise TextExtractionError("PDF", e) from e

    @staticmethod
    def preprocess_image(img: Image.Image) -> Image.Image:
        """Grayscale, stretch contrast, sharpen and fit within the OCR working size"""
        gray = ImageOps.autocontrast(img.convert('L'), cutoff=1)
        gray = gray.filter(ImageFilter.SHARPEN)

        width, height = gray.size
        scale = OCR_MAX_SIDE / max(width, height)
        new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
        return gray.resize(new_size, Image.Resampling.LANCZOS)

    def extract_text_from_image(self, file_path: str) -> str:
        if not os.path.exists(file_path):
            raise TextExtractionError("image", f"file not found: {file_path}")

        try:
            with Image.open(file_path) as img:
                processed = self.preprocess_image(img)
                text = pytesseract.image_to_string(processed, lang='eng', config=OCR_CONFIG)
        except (UnidentifiedImageError, OSError, pytesseract.TesseractError) as e:
            raise TextExtractionError("image", e) from e

        logger.info(f"OCR completed: {len(text)} characters")
        return text
