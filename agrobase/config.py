# config.py - environment settings (Cloud Run injects env; .env for local dev)
import os

from dotenv import load_dotenv

load_dotenv()

# ---- ADK wiring -------------------------------------------------------------
ADK_SERVER_URL = os.getenv("ADK_SERVER_URL", "http://127.0.0.1:8000").rstrip("/")
ADK_USER_ID    = os.getenv("ADK_USER_ID", "user")

# One sub-app per flow under agrobase/agent/
DIAGNOSE_APP        = "diagnose_disease"
CROP_SUMMARY_APP    = "summarize_crop_disease"
ANIMAL_SUMMARY_APP  = "summarize_animal_disease"
CROP_INSTRUCTIONS_APP = "crop_instructions"

# ---- Model ------------------------------------------------------------------
MODEL_NAME    = os.getenv("AGROBASE_MODEL", "gemini-2.5-flash")
MODEL_TIMEOUT = float(os.getenv("AGROBASE_MODEL_TIMEOUT", "30"))
MODEL_RETRIES = int(os.getenv("AGROBASE_MODEL_RETRIES", "1"))

# ---- Report -----------------------------------------------------------------
# TTF for report text; Helvetica only covers Latin-1
REPORT_FONT = os.getenv("AGROBASE_REPORT_FONT") or None

# ---- Front-end --------------------------------------------------------------
LOG_LEVEL     = os.getenv("AGROBASE_LOG_LEVEL", "INFO").upper()
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "25"))
PORT          = int(os.getenv("PORT", "8080"))
