# asset_frontend/config.py
# Environment-aware configuration for the asset inventory frontend

import os
from typing import Literal

# Environment detection - normalize to lowercase
_raw_env = os.environ.get("ENV", "production").lower()
ENV: Literal["local", "staging", "production"] = _raw_env if _raw_env in ("local", "staging", "production") else "production"  # type: ignore

# Environment flags (using normalized ENV)
IS_LOCAL = (ENV == "local")
IS_STAGING = (ENV == "staging")
IS_DEV = IS_LOCAL

# Supabase CLI default API port
LOCAL_SUPABASE_URL = "http://127.0.0.1:54321"


def validate_supabase_url(url: str, env: str) -> None:
    """
    Validate the Supabase project URL according to environment security rules.

    Raises:
        ValueError: If URL violates security constraints for the environment
    """
    if not url:
        raise ValueError("Supabase URL cannot be empty")

    # Production/staging must use HTTPS and never localhost
    if env in ("staging", "production"):
        if not url.startswith("https://"):
            raise ValueError(f"Production/staging must use HTTPS. Got: {url}")
        if "127.0.0.1" in url or "localhost" in url:
            raise ValueError(f"Production/staging cannot use localhost URLs. Got: {url}")


def get_supabase_url() -> str:
    """
    Get the Supabase project URL with strict priority and validation.

    Priority:
    1. SUPABASE_URL environment variable
    2. Local Supabase CLI default ONLY if ENV == "local"
    3. Raise error if production/staging with no configured URL

    Returns:
        Validated project URL with trailing slash removed
    """
    url = os.environ.get("SUPABASE_URL", "").strip().rstrip("/")
    if url:
        validate_supabase_url(url, ENV)
        return url

    if ENV == "local":
        return LOCAL_SUPABASE_URL

    raise RuntimeError(
        f"Supabase URL not configured for {ENV.upper()} environment. "
        f"Set the SUPABASE_URL environment variable to your project URL. "
        f"Production/staging MUST use HTTPS and cannot fall back to localhost."
    )


def get_supabase_anon_key() -> str:
    """Public anon key; row-level security on the project does the real gating."""
    return os.environ.get("SUPABASE_ANON_KEY", "").strip()


try:
    SUPABASE_URL = get_supabase_url()
except RuntimeError as e:
    print(f"[CONFIG] CRITICAL: {e}")
    SUPABASE_URL = ""  # Will cause errors on API calls, which is correct behavior

SUPABASE_ANON_KEY = get_supabase_anon_key()

REQUEST_TIMEOUT_SECONDS = int(os.environ.get("REQUEST_TIMEOUT_SECONDS", "20"))

# Feature flags
ENABLE_DEBUG_UI = IS_DEV  # Show debug panel only in dev
ENABLE_VERBOSE_LOGGING = IS_DEV or IS_STAGING

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Supabase URL: {SUPABASE_URL}")
print(f"[CONFIG] Anon key: {'set' if SUPABASE_ANON_KEY else 'missing'}")
print(f"[CONFIG] Debug UI: {'enabled' if ENABLE_DEBUG_UI else 'disabled'}")
