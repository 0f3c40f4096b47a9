from .base import OCRBackend, OCRResult, clean_base64_data, decode_base64
from .fixture import FixtureBackend
from .space import OCRSpaceBackend
from .tesseract import TesseractBackend

__all__ = [
    "FixtureBackend",
    "OCRBackend",
    "OCRResult",
    "OCRSpaceBackend",
    "TesseractBackend",
    "clean_base64_data",
    "decode_base64",
]
