# =============================================================================
# lib/image_generation.py - Text-to-Image
# =============================================================================
# Generates images with Imagen 4 on Replicate, then copies the result into
# our own storage bucket (folder "generated-images") so links do not expire.
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import replicate

from app.config import settings
from lib.utils import ApplicationError

if TYPE_CHECKING:
    from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

IMAGEN_MODEL = "google/imagen-4"
IMAGE_FOLDER = "generated-images"

ASPECT_RATIOS = {"1:1", "9:16", "16:9", "3:4", "4:3"}
SAFETY_LEVELS = {"block_low_and_above", "block_medium_and_above", "block_only_high"}


class ImageGenerationError(ApplicationError):
    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=kwargs.pop("code", "IMAGE_GENERATION_ERROR"), **kwargs)


def _output_url(output: Any) -> str | None:
    """Replicate returns a URL string, a FileOutput, or a list of either."""
    if isinstance(output, list):
        output = output[0] if output else None
    if output is None:
        return None
    url = getattr(output, "url", output)
    return url if isinstance(url, str) and url else None


class ImageGenerator:
    def __init__(self, replicate_client: Any, storage: StorageService):
        self.replicate = replicate_client
        self.storage = storage

    @classmethod
    def from_settings(cls, storage: StorageService) -> ImageGenerator:
        if not settings.has_replicate:
            raise ImageGenerationError(
                "Replicate is not configured",
                code="IMAGE_GENERATION_NOT_CONFIGURED",
                suggestion="Set REPLICATE_API_KEY in your .env file",
            )
        return cls(replicate.Client(api_token=settings.REPLICATE_API_KEY), storage)

    def generate_image(
        self,
        prompt: str,
        aspect_ratio: str = "16:9",
        safety_filter_level: str = "block_only_high",
    ) -> dict[str, Any]:
        """
        Generate an image and store it.

        Returns:
            Storage result dict (key, public_url, size)

        Raises:
            ImageGenerationError: Bad arguments, model failure or no output
        """
        if not prompt or not prompt.strip():
            raise ImageGenerationError("Prompt cannot be empty")
        if aspect_ratio not in ASPECT_RATIOS:
            raise ImageGenerationError(f"Unsupported aspect ratio: {aspect_ratio}")
        if safety_filter_level not in SAFETY_LEVELS:
            raise ImageGenerationError(f"Unsupported safety filter level: {safety_filter_level}")

        try:
            output = self.replicate.run(
                IMAGEN_MODEL,
                input={
                    "prompt": prompt,
                    "aspect_ratio": aspect_ratio,
                    "output_format": "png",
                    "safety_filter_level": safety_filter_level,
                },
            )
        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            raise ImageGenerationError(f"Image generation failed: {e}")

        url = _output_url(output)
        if url is None:
            raise ImageGenerationError("No image URL returned from model")

        filename = f"imagen-4-{int(time.time() * 1000)}.png"
        stored = self.storage.upload_from_url(
            url,
            filename=filename,
            folder=IMAGE_FOLDER,
            content_type="image/png",
        )
        logger.info(f"Generated image stored at {stored['key']}")
        return stored
