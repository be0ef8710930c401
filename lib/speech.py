# =============================================================================
# lib/speech.py - Speech-to-Text
# =============================================================================
# Transcribes audio with Whisper on Replicate.
#
# Audio can be passed as a public URL or as raw bytes. Bytes are uploaded
# to storage first (folder "audio-transcription") because Replicate reads
# its input from a URL.
#
# Usage:
#   from lib.speech import SpeechClient
#   text = SpeechClient.from_settings().transcribe_audio("https://.../call.mp3")
# =============================================================================

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import replicate

from app.config import settings
from lib.utils import ApplicationError

if TYPE_CHECKING:
    from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)

WHISPER_MODEL = (
    "vaibhavs10/incredibly-fast-whisper:"
    "3ab86df6c8f54c11309d4d1f930ac292bad43ace52d10c80d87eb258b3c9f79c"
)
AUDIO_FOLDER = "audio-transcription"


class SpeechError(ApplicationError):
    def __init__(self, message: str, **kwargs):
        super().__init__(message, code=kwargs.pop("code", "SPEECH_ERROR"), **kwargs)


class SpeechClient:
    """
    Whisper transcription via Replicate.

    Attributes:
        replicate: replicate.Client (or anything with a compatible run())
        storage: StorageService used to host byte uploads
    """

    def __init__(self, replicate_client: Any, storage: StorageService | None = None):
        self.replicate = replicate_client
        self.storage = storage

    @classmethod
    def from_settings(cls, storage: StorageService | None = None) -> SpeechClient:
        if not settings.has_replicate:
            raise SpeechError(
                "Replicate is not configured",
                code="SPEECH_NOT_CONFIGURED",
                suggestion="Set REPLICATE_API_KEY in your .env file",
            )
        return cls(replicate.Client(api_token=settings.REPLICATE_API_KEY), storage)

    def transcribe_audio(
        self,
        audio: str | bytes,
        language: str = "en",
        filename: str = "audio.mp3",
    ) -> str:
        """
        Transcribe audio to text.

        Args:
            audio: Public URL, or raw audio bytes
            language: Spoken language; "en" lets the model auto-detect
            filename: Name used when uploading bytes

        Returns:
            The transcript, stripped of surrounding whitespace
        """
        audio_url = audio if isinstance(audio, str) else self._host_audio(audio, filename)

        try:
            output = self.replicate.run(
                WHISPER_MODEL,
                input={
                    "task": "transcribe",
                    "audio": audio_url,
                    "language": "None" if language == "en" else language,
                    "timestamp": "chunk",
                    "batch_size": 64,
                    "diarise_audio": False,
                },
            )
        except Exception as e:
            logger.error(f"Transcription failed: {e}")
            raise SpeechError(f"Transcription failed: {e}")

        if not isinstance(output, dict) or not isinstance(output.get("text"), str):
            raise SpeechError("Invalid output format from transcription model")

        text = output["text"].strip()
        logger.info(f"Transcribed audio ({len(text)} characters)")
        return text

    def _host_audio(self, content: bytes, filename: str) -> str:
        if self.storage is None:
            raise SpeechError(
                "Storage is required to transcribe raw audio bytes",
                suggestion="Pass a public audio URL instead",
            )
        uploaded = self.storage.upload_file(content, filename, folder=AUDIO_FOLDER)
        return uploaded["public_url"]
