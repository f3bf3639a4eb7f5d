from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from schemas.analysis import SpeechAudio, SpeechSynthesisInput, Transcript, TranscriptionInput

logger = logging.getLogger(__name__)

# A 44-byte WAV header with an empty data chunk.
SILENT_WAV_DATA_URI = (
    "data:audio/wav;base64,UklGRiQAAABXQVZFZm10IBAAAAABAAEAVFYAAFRWAAABAAgAZGF0YQAAAAA="
)
SILENT_AUDIO_TRANSCRIPTION = (
    "This is a simulated transcription of your spoken answer. "
    "Please replace this with actual speech-to-text functionality."
)
DEFAULT_TRANSCRIPTION = "User response successfully transcribed."


class SpeechProvider(Protocol):
    async def synthesize(self, request: SpeechSynthesisInput) -> SpeechAudio: ...

    async def transcribe(self, request: TranscriptionInput) -> Transcript: ...


class NullSpeechProvider:
    """
    Placeholder speech backend. Synthesis always yields the same silent WAV
    and transcription returns canned text; no audio is processed.
    """

    def __init__(self, transcription_delay: float = 0.5):
        self.transcription_delay = transcription_delay

    async def synthesize(self, request: SpeechSynthesisInput) -> SpeechAudio:
        logger.debug("Synthesizing %d chars of text (placeholder)", len(request.text))
        return SpeechAudio(audio_data_uri=SILENT_WAV_DATA_URI)

    async def transcribe(self, request: TranscriptionInput) -> Transcript:
        if self.transcription_delay > 0:
            await asyncio.sleep(self.transcription_delay)
        if request.audio_data_uri == SILENT_WAV_DATA_URI:
            return Transcript(transcription=SILENT_AUDIO_TRANSCRIPTION)
        return Transcript(transcription=DEFAULT_TRANSCRIPTION)


def build_speech_provider(name: str, **options) -> SpeechProvider:
    normalized = name.strip().lower()
    if normalized in {"null", "placeholder", "none", ""}:
        return NullSpeechProvider(**options)
    raise ValueError(f"Unknown speech provider: {name}")
