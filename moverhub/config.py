import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./moverhub.db")

# Firebase Configuration
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID")

# Frontend base URL (CORS + links in notifications)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
# Extra allowed origins, comma-separated
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

# Capacity defaults applied when a weekday rule is auto-provisioned
DEFAULT_MORNING_JOBS = int(os.getenv("DEFAULT_MORNING_JOBS", "3"))
DEFAULT_AFTERNOON_JOBS = int(os.getenv("DEFAULT_AFTERNOON_JOBS", "2"))
DEFAULT_CREW_SIZE = int(os.getenv("DEFAULT_CREW_SIZE", "2"))

# A slot whose rule has NULL/0 max jobs is bookable while it has no jobs.
# Compatibility with rules saved before capacities were mandatory.
ALLOW_UNCONFIGURED_SLOTS = os.getenv("ALLOW_UNCONFIGURED_SLOTS", "true").lower() == "true"

# Rate limiting for reservation creation (per client IP)
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RESERVATION_RATE_LIMIT = int(os.getenv("RESERVATION_RATE_LIMIT", "20"))
RESERVATION_RATE_WINDOW = int(os.getenv("RESERVATION_RATE_WINDOW", "3600"))
