"""
Django settings for the aviario project.

Values that change between deployments are read from the environment so the
same module serves local work, tests and production.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-aviario-local-only")

DEBUG = _env_flag("DJANGO_DEBUG", default=False)

ALLOWED_HOSTS = [host.strip() for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "").split(",") if host.strip()]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "production",
    "reports",
]

MIDDLEWARE: list[str] = []

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("AVIARIO_DB_PATH", str(BASE_DIR / "db.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "pt-br"
TIME_ZONE = os.environ.get("DJANGO_TIME_ZONE", "America/Sao_Paulo")
USE_I18N = True
USE_TZ = True

TEST_RUNNER = "aviario.test_runner.NonInteractiveDiscoverRunner"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "production": {
            "handlers": ["console"],
            "level": os.environ.get("AVIARIO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "reports": {
            "handlers": ["console"],
            "level": os.environ.get("AVIARIO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}

# Optional overrides for the colour bands used by reports.services.production_dashboard.
# Example: {"laying_rate": {"critical": 0.65, "warning": 0.8}}
AVIARIO_RATE_THRESHOLDS: dict = {}
