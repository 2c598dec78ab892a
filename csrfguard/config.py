import os

CSRF_TTL = float(os.getenv("CSRF_TTL", "30"))
CSRF_SWEEP_INTERVAL = float(os.getenv("CSRF_SWEEP_INTERVAL", str(CSRF_TTL)))
CSRF_HEADER = os.getenv("CSRF_HEADER", "X-CSRF-Token")

WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("WEB_PORT", "3000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "data")

# comma separated; empty means no CORS headers (same-origin clients only)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
