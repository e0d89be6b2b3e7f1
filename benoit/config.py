import os
import sys
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level up from benoit/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
# In pytest, keep config deterministic from env vars set by tests.
if "pytest" not in sys.modules:
    load_dotenv(_env_path)

# Mock Mode Toggle
# When True, the Gemini service returns scripted replies and no audio
# When False, real API calls are made (requires GEMINI_API_KEY)
MOCK_MODE = os.getenv("MOCK_MODE", "true").lower() in ("true", "1", "yes")

# Google Gemini - tutor replies + text-to-speech
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "") or os.getenv("API_KEY", "")
GEMINI_BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
GEMINI_TTS_MODEL = os.getenv("GEMINI_TTS_MODEL", "gemini-2.5-flash-preview-tts")
GEMINI_VOICE = os.getenv("GEMINI_VOICE", "Puck")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
