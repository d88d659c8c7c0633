import os
import sys

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

# Database (secrets table only)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./adstudio.db")

# OpenAI script drafting
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_TEMPERATURE = float(os.getenv("OPENAI_TEMPERATURE", "0.7"))

# ElevenLabs text-to-speech
# Deployments use ELEVEN_LABS_API_KEY; the SDK docs use ELEVENLABS_API_KEY.
ELEVEN_LABS_API_KEY = os.getenv("ELEVEN_LABS_API_KEY") or os.getenv("ELEVENLABS_API_KEY", "")
ELEVENLABS_MODEL_ID = os.getenv("ELEVENLABS_MODEL_ID", "eleven_monolingual_v1")
ELEVENLABS_STABILITY = float(os.getenv("ELEVENLABS_STABILITY", "0.5"))
ELEVENLABS_SIMILARITY_BOOST = float(os.getenv("ELEVENLABS_SIMILARITY_BOOST", "0.5"))

# Speech rate used for duration estimates
SPEECH_WORDS_PER_MINUTE = float(os.getenv("SPEECH_WORDS_PER_MINUTE", "140"))
SPEECH_PAUSE_BUFFER = float(os.getenv("SPEECH_PAUSE_BUFFER", "1.0"))

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8001))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Front-end / client side
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8001")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "120"))
CLIP_DIR = os.getenv("CLIP_DIR", "./temp_clips")
CLIP_MAX_AGE_DAYS = float(os.getenv("CLIP_MAX_AGE_DAYS", "1"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "")


def configure_logging(level: str = LOG_LEVEL, log_file: str = LOG_FILE) -> None:
    """Send loguru output to stderr, plus a rotating file when LOG_FILE is set."""
    logger.remove()
    logger.add(sys.stderr, level=level)
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        logger.add(log_file, rotation="1 MB", retention="7 days", enqueue=True, level=level)
