from fastapi import APIRouter, Depends
import asyncio
import base64
from sqlalchemy.orm import Session
from loguru import logger

from adstudio.config import ELEVEN_LABS_API_KEY, SPEECH_WORDS_PER_MINUTE, SPEECH_PAUSE_BUFFER
from adstudio.database import get_db
from adstudio.schemas.studio_schemas import (
    ScriptRequest,
    ShortenRequest,
    ScriptResponse,
    DurationCheckRequest,
    DurationCheckResponse,
    VoicesResponse,
    VoiceOut,
    AudioRequest,
    AudioResponse,
    ErrorResponse,
)
from adstudio.services import duration
from adstudio.services.secrets import get_secret
from adstudio.services.script_generator import ScriptGenerator
from adstudio.services.elevenlabs_tts_service import ElevenLabsTTSService


router = APIRouter(prefix="/api", tags=["Studio"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ===============================
# PROVIDER DEPENDENCIES
# ===============================
def get_script_generator(db: Session = Depends(get_db)) -> ScriptGenerator:
    return ScriptGenerator(api_key=get_secret(db, "OPENAI_API_KEY"))


def get_tts_service(db: Session = Depends(get_db)) -> ElevenLabsTTSService:
    api_key = ELEVEN_LABS_API_KEY or get_secret(db, "ELEVEN_LABS_API_KEY")
    return ElevenLabsTTSService(api_key=api_key)


# ============================================================================
# ENDPOINT 1: Generate Script
# ============================================================================
@router.post("/generate-script", response_model=ScriptResponse, responses=ERROR_RESPONSES)
async def generate_script(
    request: ScriptRequest,
    generator: ScriptGenerator = Depends(get_script_generator),
):
    """Draft a radio ad script for the brand brief and target duration."""
    logger.info(f"🎬 Script request: brand={request.brand_name!r} duration={request.duration}s")

    script = await asyncio.to_thread(
        generator.generate_script,
        request.brand_name,
        request.description,
        request.duration,
    )
    return ScriptResponse(script=script)


# ============================================================================
# ENDPOINT 2: Shorten Script
# ============================================================================
@router.post("/shorten-script", response_model=ScriptResponse, responses=ERROR_RESPONSES)
async def shorten_script(
    request: ShortenRequest,
    generator: ScriptGenerator = Depends(get_script_generator),
):
    """Rewrite an over-long script down to the word budget of its ad slot."""
    before = duration.count_words(request.script)
    script = await asyncio.to_thread(
        generator.shorten_script,
        request.script,
        request.duration,
        request.brand_name,
    )
    logger.info(f"✂️ Shortened script: {before} → {duration.count_words(script)} words")
    return ScriptResponse(script=script)


# ============================================================================
# ENDPOINT 3: Check Script Duration
# ============================================================================
@router.post(
    "/check-script-duration",
    response_model=DurationCheckResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
async def check_script_duration(request: DurationCheckRequest):
    """Estimate spoken duration; include the fit verdict when a target is given."""
    seconds = duration.estimate(
        request.script,
        words_per_minute=SPEECH_WORDS_PER_MINUTE,
        buffer=SPEECH_PAUSE_BUFFER,
    )
    response = DurationCheckResponse(
        duration=round(seconds, 1),
        word_count=duration.count_words(request.script),
    )
    if request.duration is not None:
        check = duration.evaluate(seconds, request.duration)
        response.verdict = check.verdict
        response.margin_seconds = round(check.margin_seconds, 1)

    logger.info(f"⏱ Estimated duration: {response.duration} seconds")
    return response


# ============================================================================
# ENDPOINT 4: List Voices
# ============================================================================
@router.get("/voices", response_model=VoicesResponse, responses=ERROR_RESPONSES)
async def list_voices(tts: ElevenLabsTTSService = Depends(get_tts_service)):
    voices = await asyncio.to_thread(tts.list_voices)
    logger.info(f"✅ {len(voices)} voices available")
    return VoicesResponse(voices=[VoiceOut(**voice) for voice in voices])


# ============================================================================
# ENDPOINT 5: Generate Audio
# ============================================================================
@router.post("/generate-audio", response_model=AudioResponse, responses=ERROR_RESPONSES)
async def generate_audio(
    request: AudioRequest,
    tts: ElevenLabsTTSService = Depends(get_tts_service),
):
    """Render the script with the chosen voice; audio comes back base64 encoded."""
    audio = await asyncio.to_thread(tts.synthesize, request.script, request.voice_id)
    return AudioResponse(audio_content=base64.b64encode(audio).decode("ascii"))
