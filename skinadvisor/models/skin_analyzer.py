import io
import logging
from typing import Dict, Any

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from skinadvisor.models.skin_traits import SkinReadings, SkinTraitAssessment

logger = logging.getLogger(__name__)

# Pigmentation spots are pixels this much darker than the mean lightness
PIGMENT_CONTRAST = 40
MIN_PIGMENT_AREA = 5.0


class ImageDecodeError(ValueError):
    """The uploaded bytes are not a readable image."""


class SkinAnalyzer:
    """Coarse skin heuristics on a single face photo, OpenCV only."""

    def __init__(self, blur_kernel: int = 5, canny_low: int = 50, canny_high: int = 150):
        self.blur_kernel = blur_kernel
        self.canny_low = canny_low
        self.canny_high = canny_high

    def decode_image(self, image_data: bytes) -> np.ndarray:
        """Decode raw upload bytes to a BGR array"""
        if not image_data:
            raise ImageDecodeError("Empty image upload")
        try:
            image = Image.open(io.BytesIO(image_data)).convert("RGB")
        except (UnidentifiedImageError, OSError) as e:
            raise ImageDecodeError(f"Unreadable image data: {e}") from e
        return cv2.cvtColor(np.array(image), cv2.COLOR_RGB2BGR)

    def _count_acne_spots(self, blurred: np.ndarray) -> int:
        binary = cv2.adaptiveThreshold(
            blurred,
            255,
            cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
            cv2.THRESH_BINARY_INV,
            11,
            2
        )
        contours, _ = cv2.findContours(binary, cv2.RETR_CCOMP, cv2.CHAIN_APPROX_SIMPLE)
        return len(contours)

    def _count_pigmentation_spots(self, image: np.ndarray) -> int:
        lab = cv2.cvtColor(image, cv2.COLOR_BGR2LAB)
        lightness = cv2.GaussianBlur(lab[:, :, 0], (self.blur_kernel, self.blur_kernel), 0)
        cutoff = float(np.mean(lightness)) - PIGMENT_CONTRAST
        if cutoff <= 0:
            return 0

        _, dark = cv2.threshold(lightness, cutoff, 255, cv2.THRESH_BINARY_INV)
        kernel = np.ones((3, 3), np.uint8)
        dark = cv2.morphologyEx(dark, cv2.MORPH_OPEN, kernel)
        contours, _ = cv2.findContours(dark, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        return sum(1 for contour in contours if cv2.contourArea(contour) >= MIN_PIGMENT_AREA)

    def _edge_density(self, blurred: np.ndarray) -> float:
        edges = cv2.Canny(blurred, self.canny_low, self.canny_high)
        return float(np.count_nonzero(edges)) / edges.size * 100.0

    def measure(self, image: np.ndarray) -> SkinReadings:
        """Compute raw heuristic readings for a BGR image"""
        gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        blurred = cv2.GaussianBlur(gray, (self.blur_kernel, self.blur_kernel), 0)

        return SkinReadings(
            acne_spots=self._count_acne_spots(blurred),
            brightness=float(np.mean(gray)),
            pigmentation_spots=self._count_pigmentation_spots(image),
            edge_density=self._edge_density(blurred),
        )

    def analyze_skin(self, image_data: bytes) -> Dict[str, Any]:
        """
        Analyze an uploaded face photo.

        Args:
            image_data: Raw image bytes (JPEG, PNG)

        Returns:
            Dictionary with the raw readings and the derived trait assessment
        """
        image = self.decode_image(image_data)
        height, width = image.shape[:2]
        readings = self.measure(image)
        assessment = SkinTraitAssessment.from_readings(readings)

        logger.info(
            f"🔍 Analyzed {width}x{height} image: acne_spots={readings.acne_spots}, "
            f"brightness={readings.brightness:.1f}, pigmentation_spots={readings.pigmentation_spots}, "
            f"edge_density={readings.edge_density:.2f}%"
        )

        return {
            "readings": {
                "acne_spots": readings.acne_spots,
                "brightness": round(readings.brightness, 2),
                "pigmentation_spots": readings.pigmentation_spots,
                "edge_density": round(readings.edge_density, 2),
            },
            "assessment": assessment.to_dict(),
            "summary": assessment.describe(),
        }
