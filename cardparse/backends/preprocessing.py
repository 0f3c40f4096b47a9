"""
Image preprocessing for local OCR.
Cleans up card photos before they are handed to Tesseract.
"""

import io
import logging

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import DecodeError

logger = logging.getLogger(__name__)


class ImagePreprocessor:
    """Preprocesses business card images for OCR."""

    MIN_WIDTH = 1500

    @staticmethod
    def load(image_bytes: bytes) -> np.ndarray:
        """
        Decode raw image bytes into a BGR array.

        Raises:
            DecodeError: If the bytes are not a readable image
        """
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                rgb = np.array(img.convert("RGB"))
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise DecodeError("unreadable image", original_error=e)
        return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

    @staticmethod
    def prepare(img: np.ndarray, denoise: bool = True) -> np.ndarray:
        """
        Upscale, deskew and binarize a card image.

        Args:
            img: BGR or grayscale image
            denoise: Run non-local means denoising (slow on large images)

        Returns:
            Single channel uint8 image, black text on white
        """
        height, width = img.shape[:2]
        if width < ImagePreprocessor.MIN_WIDTH:
            scale = ImagePreprocessor.MIN_WIDTH / width
            img = cv2.resize(
                img,
                (int(width * scale), int(height * scale)),
                interpolation=cv2.INTER_CUBIC
            )
            logger.debug(f"Upscaled image from {width}px to {img.shape[1]}px wide")

        gray = img if img.ndim == 2 else cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
        gray = ImagePreprocessor.deskew(gray)

        if denoise:
            gray = cv2.fastNlMeansDenoising(gray, None, h=10, templateWindowSize=7, searchWindowSize=21)

        # CLAHE evens out shadows and uneven lighting
        clahe = cv2.createCLAHE(clipLimit=3.0, tileGridSize=(10, 10))
        enhanced = clahe.apply(gray)

        sharpen = np.array([
            [-1, -1, -1],
            [-1,  9, -1],
            [-1, -1, -1]
        ])
        sharpened = cv2.filter2D(enhanced, -1, sharpen)

        adaptive = cv2.adaptiveThreshold(
            sharpened, 255, cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY, 11, 2
        )
        otsu = cv2.threshold(sharpened, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)[1]

        # Keep whichever leaves the cleaner (whiter) background
        binary = adaptive if np.sum(adaptive == 255) > np.sum(otsu == 255) else otsu

        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (2, 2))
        cleaned = cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel)
        return ImagePreprocessor.clear_border(cleaned)

    @staticmethod
    def clear_border(img: np.ndarray, border_size: int = 5) -> np.ndarray:
        """Paint a white frame over edge noise."""
        result = img.copy()
        result[:border_size, :] = 255
        result[-border_size:, :] = 255
        result[:, :border_size] = 255
        result[:, -border_size:] = 255
        return result

    @staticmethod
    def deskew(gray: np.ndarray, min_angle: float = 1.0) -> np.ndarray:
        """Rotate a crooked card photo back to horizontal."""
        edges = cv2.Canny(gray, 50, 150)
        contours = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        contours = contours[0] if len(contours) == 2 else contours[1]
        if not contours:
            return gray

        card = max(contours, key=cv2.contourArea)
        angle = cv2.minAreaRect(card)[-1]
        # OpenCV reports [0, 90); fold into (-45, 45]
        if angle > 45:
            angle -= 90

        if abs(angle) <= min_angle:
            return gray

        h, w = gray.shape[:2]
        matrix = cv2.getRotationMatrix2D((w // 2, h // 2), angle, 1.0)
        logger.debug(f"Deskewed image by {angle:.1f} degrees")
        return cv2.warpAffine(
            gray, matrix, (w, h),
            flags=cv2.INTER_CUBIC,
            borderMode=cv2.BORDER_REPLICATE
        )
