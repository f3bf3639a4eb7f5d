import asyncio

import pytest

from schemas.analysis import SpeechSynthesisInput, TranscriptionInput
from speech.providers import (
    DEFAULT_TRANSCRIPTION,
    SILENT_AUDIO_TRANSCRIPTION,
    SILENT_WAV_DATA_URI,
    NullSpeechProvider,
    build_speech_provider,
)


def test_synthesis_is_deterministic():
    provider = NullSpeechProvider(transcription_delay=0)
    request = SpeechSynthesisInput(text="Why do you want this role?", voice="alloy")

    first = asyncio.run(provider.synthesize(request))
    second = asyncio.run(provider.synthesize(request))

    assert first.audio_data_uri == second.audio_data_uri == SILENT_WAV_DATA_URI


def test_own_silent_clip_gets_distinguishing_transcription():
    provider = NullSpeechProvider(transcription_delay=0)
    audio = asyncio.run(provider.synthesize(SpeechSynthesisInput(text="Hello")))

    transcript = asyncio.run(
        provider.transcribe(TranscriptionInput(audio_data_uri=audio.audio_data_uri))
    )

    assert transcript.transcription == SILENT_AUDIO_TRANSCRIPTION


def test_other_audio_gets_generic_transcription():
    provider = NullSpeechProvider(transcription_delay=0)
    transcript = asyncio.run(
        provider.transcribe(
            TranscriptionInput(audio_data_uri="data:audio/webm;base64,GkXfow==", language_hint="en")
        )
    )
    assert transcript.transcription == DEFAULT_TRANSCRIPTION


def test_build_speech_provider():
    provider = build_speech_provider("null", transcription_delay=0.1)
    assert isinstance(provider, NullSpeechProvider)
    assert provider.transcription_delay == 0.1
    with pytest.raises(ValueError):
        build_speech_provider("cloud-tts")
