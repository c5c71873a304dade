#  Latam Site - Configuration
#
#  Loads config.json (optional) and provides typed access to all settings.
#  Dot-notation path lookup: cfg("rate_limit.general")
#  Environment variables override the file for deploy-time options.
#
#  Depends on: config.json
#  Used by:    all latam_site modules

import json
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = Path(os.environ.get("SITE_CONFIG", PROJECT_ROOT / "config.json"))

# ---------------------------------------------------------------------------
# Load config
# ---------------------------------------------------------------------------

_config: dict = {}


def _load_config(path: Path | None = None):
    """Load configuration from JSON file (internal, called once at import time).

    Module-level constants below are snapshots from _config.
    Do not call this function after import; constants won't update.
    """
    global _config
    config_path = path or CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}. "
            "Copy config.example.json to config.json."
        )
    with open(config_path) as f:
        _config = json.load(f)


# The file is optional: every setting has a default or an env override
if CONFIG_PATH.exists():
    _load_config()


def cfg(path: str, default=None):
    """Get a config value by dot-notation path.

    Example: cfg("rate_limit.contact") -> "5/hour"
    """
    keys = path.split(".")
    val = _config
    for key in keys:
        if isinstance(val, dict) and key in val:
            val = val[key]
        else:
            return default
    return val


def _env_list(name: str) -> list[str] | None:
    raw = os.environ.get(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_int(name: str, default):
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        # Left as-is so validate_config() reports it
        return raw


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

HOST = cfg("server.host", "0.0.0.0")
PORT = _env_int("PORT", cfg("server.port", 3000))
ENVIRONMENT = os.environ.get("NODE_ENV") or cfg("server.environment", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.environ.get("LOG_LEVEL") or cfg("server.log_level", "INFO")
LOG_FORMAT = os.environ.get("LOG_FORMAT") or cfg("server.log_format", "json")
TRUST_PROXY = cfg("server.trust_proxy", False)
MAX_BODY_BYTES = cfg("server.max_body_bytes", 100 * 1024)
APP_VERSION = "1.0.0"

ALLOWED_ORIGINS = _env_list("ALLOWED_ORIGINS") or cfg("server.allowed_origins", [
    "http://localhost:3000",
    f"http://localhost:{PORT}",
    "http://127.0.0.1:3000",
])

# ---------------------------------------------------------------------------
# Site
# ---------------------------------------------------------------------------

SITE_NAME = cfg("site.name", "Comercio y Negocios Latam SAC")
SITE_BASE_URL = cfg("site.base_url", "https://www.comercionegocioslatam.com").rstrip("/")
STATIC_DIR = Path(cfg("site.static_dir", str(PROJECT_ROOT / "public")))
SITE_PAGES: list[dict] = cfg("site.pages", [
    {"path": "/", "changefreq": "weekly", "priority": 1.0},
    {"path": "/nosotros", "changefreq": "monthly", "priority": 0.8},
    {"path": "/servicios", "changefreq": "monthly", "priority": 0.9},
    {"path": "/contacto", "changefreq": "yearly", "priority": 0.7},
])

# ---------------------------------------------------------------------------
# Security headers
# ---------------------------------------------------------------------------

CSP_DIRECTIVES: dict[str, list[str]] = cfg("security.csp", {
    "default-src": ["'self'"],
    "script-src": [
        "'self'",
        "'unsafe-inline'",
        "https://www.googletagmanager.com",
        "https://www.google-analytics.com",
    ],
    "style-src": ["'self'", "'unsafe-inline'", "https://fonts.googleapis.com"],
    "font-src": ["'self'", "https://fonts.gstatic.com"],
    "img-src": ["'self'", "data:", "https:", "https://www.google-analytics.com"],
    "connect-src": [
        "'self'",
        "https://api.resend.com",
        "https://www.google-analytics.com",
        "https://www.googletagmanager.com",
    ],
    "frame-src": ["'self'", "https://www.googletagmanager.com"],
    "object-src": ["'none'"],
    "upgrade-insecure-requests": [],
})
HSTS_MAX_AGE = cfg("security.hsts_max_age", 31536000)

# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

RATE_LIMIT_STORAGE_URI = cfg("rate_limit.storage_uri", "memory://")
RATE_LIMIT_GENERAL = cfg("rate_limit.general", "100/15 minutes")
RATE_LIMIT_CONTACT = cfg("rate_limit.contact", "5/hour")

# ---------------------------------------------------------------------------
# CSRF / session
# ---------------------------------------------------------------------------

SESSION_COOKIE_NAME = cfg("csrf.session_cookie", "sid")
SESSION_COOKIE_SECURE = cfg("csrf.cookie_secure", IS_PRODUCTION)
CSRF_HEADER_NAME = cfg("csrf.header_name", "X-CSRF-Token")
CSRF_BODY_FIELD = cfg("csrf.body_field", "_csrf")
CSRF_TOKEN_TTL = cfg("csrf.token_ttl_seconds", 3600)

# ---------------------------------------------------------------------------
# Email
# ---------------------------------------------------------------------------

EMAIL_USER = os.environ.get("EMAIL_USER", "")
EMAIL_PASSWORD = os.environ.get("EMAIL_PASSWORD", "")
EMAIL_SERVICE = os.environ.get("EMAIL_SERVICE") or cfg("email.service", "gmail")
EMAIL_TO = os.environ.get("EMAIL_TO") or EMAIL_USER
EMAIL_HOST = os.environ.get("EMAIL_HOST") or cfg("email.host", "")
EMAIL_PORT = _env_int("EMAIL_PORT", cfg("email.port", None))
EMAIL_TIMEOUT = cfg("email.timeout", 15.0)

# ---------------------------------------------------------------------------
# AI chat proxy
# ---------------------------------------------------------------------------

HF_TOKEN = os.environ.get("HF_TOKEN", "")
AI_CHAT_URL = cfg("ai_chat.url", "https://router.huggingface.co/v1/chat/completions")
AI_CHAT_MODEL = cfg("ai_chat.model", "openai/gpt-oss-120b:fastest")
AI_CHAT_TIMEOUT = cfg("ai_chat.timeout", 30.0)
AI_CHAT_MAX_PROMPT_CHARS = cfg("ai_chat.max_prompt_chars", 4000)


# ---------------------------------------------------------------------------
# Startup validation
# ---------------------------------------------------------------------------

def validate_config():
    """Validate critical config values. Call during app startup (not at import time).

    Raises ConfigError for fatal issues, logs warnings for non-fatal ones.
    """
    import logging

    from limits import parse

    _logger = logging.getLogger("latam_site.config")

    # Fatal: port must be valid
    if not isinstance(PORT, int) or not (1 <= PORT <= 65535):
        raise ConfigError(f"PORT must be 1-65535, got {PORT}")

    # Fatal: rate limit policies must parse
    for label, val in [("rate_limit.general", RATE_LIMIT_GENERAL),
                       ("rate_limit.contact", RATE_LIMIT_CONTACT)]:
        try:
            parse(val)
        except ValueError:
            raise ConfigError(f"{label} is not a valid rate limit string, got '{val}'")

    # Fatal: timeouts and TTLs must be positive
    for label, val in [("email.timeout", EMAIL_TIMEOUT),
                       ("ai_chat.timeout", AI_CHAT_TIMEOUT),
                       ("csrf.token_ttl_seconds", CSRF_TOKEN_TTL),
                       ("server.max_body_bytes", MAX_BODY_BYTES)]:
        if not isinstance(val, (int, float)) or val <= 0:
            raise ConfigError(f"{label} must be > 0, got {val}")

    if EMAIL_PORT is not None and (not isinstance(EMAIL_PORT, int) or not (1 <= EMAIL_PORT <= 65535)):
        raise ConfigError(f"EMAIL_PORT must be 1-65535, got {EMAIL_PORT}")

    # Fatal: CORS origins must be valid URLs
    for origin in ALLOWED_ORIGINS:
        if not isinstance(origin, str):
            raise ConfigError(f"CORS origin must be a string, got {type(origin).__name__}")
        if origin == "*":
            _logger.warning("CORS origin '*' allows all origins; not recommended for production")
        elif not origin.startswith(("http://", "https://")):
            raise ConfigError(
                f"CORS origin must start with http:// or https://, got '{origin}'"
            )

    # Warning: contact form cannot deliver without credentials
    if not EMAIL_USER or not EMAIL_PASSWORD:
        _logger.warning(
            "EMAIL_USER / EMAIL_PASSWORD are not set. Contact form submissions "
            "will fail with a delivery error."
        )

    # Warning: AI chat proxy has no token
    if not HF_TOKEN:
        _logger.warning("HF_TOKEN is not set. AI chat requests will be rejected upstream.")

    if IS_PRODUCTION and not SESSION_COOKIE_SECURE:
        _logger.warning("Session cookie is not marked Secure in production")


class ConfigError(Exception):
    """Raised when critical configuration is invalid."""
