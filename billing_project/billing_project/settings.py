"""
Django settings for billing_project.

Values that change between deployments come from config.BillingSettings.
"""
from .config import billing_settings

BASE_DIR = billing_settings.PROJECT_ROOT

SECRET_KEY = billing_settings.SECRET_KEY
DEBUG = billing_settings.DEBUG
ALLOWED_HOSTS = billing_settings.ALLOWED_HOSTS

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "billing_core.apps.BillingCoreConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Replace request.user with the bearer token's user on /api/ routes
    "billing_core.middleware.JWTAuthenticationMiddleware",
    # Turn billing errors into JSON responses
    "billing_core.middleware.BillingErrorMiddleware",
]

ROOT_URLCONF = "billing_project.urls"
WSGI_APPLICATION = "billing_project.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": str(billing_settings.DATABASE_PATH),
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
     "OPTIONS": {"min_length": 6}},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Login/register attempt counters live here
CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "billing",
    }
}

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------- Billing ----------
BILLING_REFERENCE_TIMEZONE = billing_settings.REFERENCE_TIMEZONE
BILLING_DEFAULT_TAX_RATE = billing_settings.DEFAULT_TAX_RATE
BILLING_JWT = {
    "SECRET_KEY": billing_settings.JWT_SECRET_KEY,
    "ALGORITHM": billing_settings.JWT_ALGORITHM,
    "ACCESS_TOKEN_EXPIRE_MINUTES": billing_settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
}
BILLING_AUTH_RATE_LIMIT = {
    "ENABLED": billing_settings.AUTH_RATE_LIMIT_ENABLED,
    "ATTEMPTS": billing_settings.AUTH_RATE_LIMIT_ATTEMPTS,
    "WINDOW_SECONDS": billing_settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
}

# ---------- Logging ----------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "billing_core": {
            "handlers": ["console"],
            "level": billing_settings.LOG_LEVEL,
            "propagate": False,
        },
    },
}
