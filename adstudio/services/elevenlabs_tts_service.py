# adstudio/services/elevenlabs_tts_service.py

from typing import List, Dict

import httpx
from elevenlabs import VoiceSettings
from elevenlabs.client import ElevenLabs
from elevenlabs.core.api_error import ApiError
from loguru import logger

from adstudio.config import ELEVENLABS_MODEL_ID, ELEVENLABS_STABILITY, ELEVENLABS_SIMILARITY_BOOST
from adstudio.errors import UpstreamError, VoiceUnavailableError


# ElevenLabs marks voices that need a paid tier with this detail status
FREE_USER_RESTRICTION = "free_users_not_allowed"

VOICE_UNAVAILABLE_MESSAGE = (
    "This voice is not available for free users. "
    "Please try a different voice or upgrade your ElevenLabs account."
)


class ElevenLabsTTSService:
    """
    ElevenLabs Text-to-Speech service
    Lists the account's voices and renders scripts to MPEG audio.
    """

    def __init__(self, api_key: str, client: ElevenLabs = None):
        self.client = client or ElevenLabs(api_key=api_key)
        self.model_id = ELEVENLABS_MODEL_ID

    def list_voices(self) -> List[Dict[str, str]]:
        logger.info("🔊 Fetching voices from ElevenLabs...")
        try:
            response = self.client.voices.get_all()
        except ApiError as e:
            logger.error(f"ElevenLabs API error: {e.status_code} {e.body}")
            raise UpstreamError(f"ElevenLabs API error: {e.body}") from e
        except httpx.HTTPError as e:
            logger.error(f"ElevenLabs unreachable: {e}")
            raise UpstreamError(f"Could not reach ElevenLabs: {e}") from e

        voices = getattr(response, "voices", response) or []
        return [
            {
                "voice_id": voice.voice_id,
                "name": voice.name or "",
                "category": voice.category or "",
            }
            for voice in voices
        ]

    def synthesize(self, text: str, voice_id: str) -> bytes:
        logger.info(f"🎙 Generating ElevenLabs audio with voice {voice_id} ({len(text)} chars)")
        try:
            audio_stream = self.client.text_to_speech.convert(
                voice_id=voice_id,
                text=text,
                model_id=self.model_id,
                voice_settings=VoiceSettings(
                    stability=ELEVENLABS_STABILITY,
                    similarity_boost=ELEVENLABS_SIMILARITY_BOOST,
                ),
            )
            # stream → bytes
            audio = b"".join(chunk for chunk in audio_stream if chunk)
        except ApiError as e:
            logger.error(f"ElevenLabs API error: {e.status_code} {e.body}")
            if FREE_USER_RESTRICTION in str(e.body):
                raise VoiceUnavailableError(VOICE_UNAVAILABLE_MESSAGE) from e
            raise UpstreamError(f"Failed to generate audio: {e.body}") from e
        except httpx.HTTPError as e:
            logger.error(f"ElevenLabs unreachable: {e}")
            raise UpstreamError(f"Could not reach ElevenLabs: {e}") from e

        if not audio:
            raise UpstreamError("ElevenLabs returned no audio")

        logger.info(f"✅ Audio generated ({len(audio)} bytes)")
        return audio
