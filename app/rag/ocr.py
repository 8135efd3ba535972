"""OCR collaborator backed by Tesseract"""

import io
import logging

import pytesseract
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from app.exceptions import UnreadableContent
from app.rag.config import rag_config

logger = logging.getLogger(__name__)

# HEIC/HEIF photos decode through Pillow once the plugin is registered
register_heif_opener()


class TesseractOCR:
    """Extract text from image bytes using pytesseract"""

    def __init__(self, languages: str = None):
        self.languages = languages or rag_config.ocr_languages

    def ocr(self, image_bytes: bytes, mime_type: str) -> str:
        """
        Run OCR on an image

        Args:
            image_bytes: Raw image file content
            mime_type: Declared image MIME type (for logging)

        Returns:
            Raw recognized text

        Raises:
            UnreadableContent: image cannot be decoded or the OCR engine failed
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
        except UnidentifiedImageError as e:
            raise UnreadableContent("Image could not be decoded.", details=str(e)) from e

        try:
            logger.info(f"Performing OCR on {mime_type} image ({len(image_bytes)} bytes)")
            text = pytesseract.image_to_string(image, lang=self.languages)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            logger.error(f"OCR failed on {mime_type} image: {e}")
            raise UnreadableContent("Text recognition failed for this image.", details=f"tesseract: {e}") from e
        finally:
            image.close()

        logger.info(f"OCR extracted {len(text)} characters from image")
        return text
