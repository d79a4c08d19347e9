import os


def get_settings_module() -> str:
    # APP_ENV picks the settings module; anything unrecognised means development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def env_float(name: str):
    """Optional float setting; unset or blank gives None."""
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


def email_config_from_env() -> dict:
    return {
        "host": os.getenv("EMAIL_HOST", ""),
        "port": int(os.getenv("EMAIL_PORT", "587")),
        "use_tls": bool(int(os.getenv("EMAIL_USE_TLS", "1"))),
        "user": os.getenv("EMAIL_USER", ""),
        "password": os.getenv("EMAIL_PASSWORD", ""),
        "from_name": os.getenv("EMAIL_FROM_NAME", "Attendance System"),
        "from_address": os.getenv("EMAIL_FROM", "no-reply@localhost"),
    }
