import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
STATE_FILE = BASE_DIR / os.getenv("STATE_FILE", "data/msupp_profiles_v1.json")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Outputs ---
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")

# --- Webhook ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")

# --- Share Links ---
# Exported links look like "{EXPORT_BASE_URL}?data=<base64>".
EXPORT_BASE_URL = os.getenv("EXPORT_BASE_URL", "http://localhost:8000/index.html")

# --- Profiles ---
DEFAULT_PROFILE_NAME = os.getenv("DEFAULT_PROFILE_NAME", "Default")
NEW_PROFILE_NAME = os.getenv("NEW_PROFILE_NAME", "New Base")

# --- Live View ---
REFRESH_INTERVAL_SECONDS = int(os.getenv("REFRESH_INTERVAL_SECONDS", "30"))
