"""
Environment configuration for the classroom updates bridge.
Two S2 credentials gate real vs stub stream mode; one Lingo.dev key gates translation.
"""

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Version string
VERSION = "1.0.0"

# Durable stream service (S2); S2_BASIN and S2_ACCESS_TOKEN are read per request
S2_ENDPOINT_TEMPLATE = os.getenv("S2_ENDPOINT_TEMPLATE", "https://{basin}.b.aws.s2.dev/v1")
S2_READ_WAIT_SEC = 60

# Localization service (Lingo.dev); LINGODOTDEV_API_KEY is read per request
LINGODOTDEV_API_URL = os.getenv("LINGODOTDEV_API_URL", "https://api.lingo.dev")
DEFAULT_TARGET_LOCALE = os.getenv("DEFAULT_TARGET_LOCALE", "en")

# Shared upstream HTTP timeout
UPSTREAM_TIMEOUT_SEC = 20.0

# Stub read loop: flush buffered records or send a keep-alive every interval
STUB_POLL_INTERVAL_SEC = 1.0

DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

# Debug flag (debug_enabled() re-reads the environment)
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

# Locales offered by the viewer
SUPPORTED_LOCALES = {"en": "English", "es": "Spanish", "zh": "Chinese"}


def get_s2_credentials():
    """Return (basin, token) from the environment; either may be None."""
    return os.getenv("S2_BASIN") or None, os.getenv("S2_ACCESS_TOKEN") or None


def stream_backend_configured() -> bool:
    """Check if both S2 credentials are present (real stream mode)."""
    basin, token = get_s2_credentials()
    return bool(basin and token)


def get_translation_api_key():
    """Return the Lingo.dev API key or None."""
    return os.getenv("LINGODOTDEV_API_KEY") or None


def translation_configured() -> bool:
    """Check if the translation backend has a credential."""
    return get_translation_api_key() is not None


def get_translation_api_url() -> str:
    return os.getenv("LINGODOTDEV_API_URL", LINGODOTDEV_API_URL).rstrip("/")


def get_s2_base_url(basin: str) -> str:
    template = os.getenv("S2_ENDPOINT_TEMPLATE", S2_ENDPOINT_TEMPLATE)
    return template.format(basin=basin).rstrip("/")


def get_s2_read_wait() -> int:
    return int(os.getenv("S2_READ_WAIT_SEC", str(S2_READ_WAIT_SEC)))


def get_upstream_timeout() -> float:
    return float(os.getenv("UPSTREAM_TIMEOUT_SEC", str(UPSTREAM_TIMEOUT_SEC)))


def get_stub_poll_interval() -> float:
    """Get the stub subscription interval in seconds."""
    return float(os.getenv("STUB_POLL_INTERVAL_SEC", str(STUB_POLL_INTERVAL_SEC)))


def get_default_target_locale() -> str:
    return os.getenv("DEFAULT_TARGET_LOCALE", DEFAULT_TARGET_LOCALE)


def get_allowed_origins() -> List[str]:
    """Get CORS origins as a list, skipping blanks."""
    raw = os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "true").lower() == "true"


def get_stream_mode() -> str:
    """Return "s2" when real credentials are configured, else "stub"."""
    return "s2" if stream_backend_configured() else "stub"


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    basin, token = get_s2_credentials()
    if bool(basin) != bool(token):
        issues.append("S2_BASIN and S2_ACCESS_TOKEN must be set together; running in stub mode")

    for name, parse in (
        ("STUB_POLL_INTERVAL_SEC", get_stub_poll_interval),
        ("UPSTREAM_TIMEOUT_SEC", get_upstream_timeout),
        ("S2_READ_WAIT_SEC", get_s2_read_wait),
    ):
        try:
            value = parse()
        except ValueError:
            issues.append(f"{name} must be a number")
            continue
        if value <= 0:
            issues.append(f"{name} must be > 0")

    if get_default_target_locale() not in SUPPORTED_LOCALES:
        issues.append(f"Unsupported DEFAULT_TARGET_LOCALE: {get_default_target_locale()}")

    return issues
