import os

from dotenv import load_dotenv

# a local .env fills in anything the environment does not already set
load_dotenv()

# ---------------- Remote range lookup ----------------
RANGE_URL = os.getenv("PWCHECK_RANGE_URL", "https://api.pwnedpasswords.com/range/{prefix}")
HTTP_TIMEOUT_SEC = float(os.getenv("PWCHECK_HTTP_TIMEOUT_SEC", "10"))
RANGE_CACHE_TTL_SEC = int(os.getenv("PWCHECK_RANGE_CACHE_TTL_SEC", "600"))  # 0 disables
RANGE_CACHE_MAX_ENTRIES = int(os.getenv("PWCHECK_RANGE_CACHE_MAX_ENTRIES", "1024"))
USER_AGENT = "pwcheck/0.3"

# Longer values are assumed to be outside any breach corpus.
MAX_CHECK_LENGTH = 50

# ---------------- Coordinator ----------------
DEBOUNCE_SEC = int(os.getenv("PWCHECK_DEBOUNCE_MS", "300")) / 1000.0

# ---------------- Service ----------------
VERSION = os.getenv("APP_VERSION", "v0.3.0")
LOG_LEVEL = os.getenv("PWCHECK_LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = [
    o.strip()
    for o in os.getenv(
        "PWCHECK_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    ).split(",")
    if o.strip()
]
