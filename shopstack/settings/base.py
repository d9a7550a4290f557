from pathlib import Path
import os
from datetime import timedelta
from decimal import Decimal

from dotenv import load_dotenv

# Load environment variables early
load_dotenv()


def _is_truthy(value):
    return value in ("1", "true", "True")


def validate_required_env_vars():
    """
    Fail fast when a critical environment variable is missing.
    """
    required_vars = {
        "SECRET_KEY": "Django secret key",
    }

    # A DATABASE_URL makes the discrete DB_PASSWORD optional
    if not os.getenv("DATABASE_URL") and not os.getenv("DB_PASSWORD"):
        required_vars["DB_PASSWORD"] = "Database password (or DATABASE_URL)"

    if not _is_truthy(os.getenv("DEBUG", "0")):
        required_vars.update({
            "STRIPE_SECRET_KEY": "Stripe secret key",
            "STRIPE_WEBHOOK_SECRET": "Stripe webhook signing secret",
            "REDIS_URL": "Redis URL",
            "EMAIL_HOST_USER": "SMTP user",
            "EMAIL_HOST_PASSWORD": "SMTP password",
        })

    missing = []
    for var, description in required_vars.items():
        if not os.getenv(var):
            missing.append(f"{var} ({description})")

    if missing:
        raise RuntimeError(
            "Missing environment variables:\n"
            + "\n".join(f"  - {var}" for var in missing)
            + "\n\nSet them in the .env file or in the process environment."
        )


validate_required_env_vars()

# --------------------------------------------------------------------------------------
# Paths
# --------------------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --------------------------------------------------------------------------------------
# Keys and mode
# --------------------------------------------------------------------------------------
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY is not set. Define it before starting the application.")

DEBUG = _is_truthy(os.getenv("DEBUG", "0"))


def _split_env(name, default=""):
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.replace(",", " ").split() if x.strip()]


SECRET_KEY_FALLBACKS = _split_env("SECRET_KEY_FALLBACKS")

# --------------------------------------------------------------------------------------
# Hosts / CSRF / CORS (comma or space separated)
# --------------------------------------------------------------------------------------
ALLOWED_HOSTS = _split_env("ALLOWED_HOSTS", "localhost 127.0.0.1 testserver")
CSRF_TRUSTED_ORIGINS = _split_env(
    "CSRF_TRUSTED_ORIGINS",
    "http://localhost:3000 http://127.0.0.1:3000 http://localhost:8000 http://127.0.0.1:8000",
)
CORS_ALLOWED_ORIGINS = _split_env(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000 http://127.0.0.1:3000",
)
CORS_ALLOW_HEADERS = (
    "accept",
    "authorization",
    "content-type",
    "x-cart-session",
    "x-request-id",
)

if DEBUG:
    CORS_ALLOW_ALL_ORIGINS = True
    CSRF_COOKIE_SECURE = False
    SESSION_COOKIE_SECURE = False
else:
    for host in ALLOWED_HOSTS:
        if host in {"localhost", "127.0.0.1", "[::1]"}:
            raise RuntimeError(f"Invalid production host: {host}")
    for origin in CORS_ALLOWED_ORIGINS:
        if "localhost" in origin or "127.0.0.1" in origin:
            raise RuntimeError(
                f"Localhost origin in production: {origin}. "
                "Configure CORS_ALLOWED_ORIGINS with production domains."
            )
    CSRF_COOKIE_SECURE = True
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_HTTPONLY = True
    CSRF_COOKIE_SAMESITE = "Strict"
    SESSION_COOKIE_SAMESITE = "Strict"

# --------------------------------------------------------------------------------------
# Apps
# --------------------------------------------------------------------------------------
INSTALLED_APPS = [
    # Django
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django_prometheus",

    # Third party
    "rest_framework",
    "rest_framework_simplejwt",
    "rest_framework_simplejwt.token_blacklist",
    "corsheaders",
    "csp",
    "simple_history",
    "django_filters",

    # Project
    "core",
    "users",
    "shops",
    "marketplace",
    "shipping",
    "taxes",
    "coupons",
    "payments",
    "notifications",
]

MIDDLEWARE = [
    "django_prometheus.middleware.PrometheusBeforeMiddleware",
    "django.middleware.security.SecurityMiddleware",
    # CORS before CommonMiddleware
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "csp.middleware.CSPMiddleware",
    "simple_history.middleware.HistoryRequestMiddleware",
    "core.middleware.RequestIDMiddleware",
    "core.middleware.PerformanceLoggingMiddleware",
    "django_prometheus.middleware.PrometheusAfterMiddleware",
]

SLOW_REQUEST_THRESHOLD = float(os.getenv("SLOW_REQUEST_THRESHOLD", "1.0"))  # seconds

ROOT_URLCONF = "shopstack.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
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

WSGI_APPLICATION = "shopstack.wsgi.application"

# --------------------------------------------------------------------------------------
# Database
# --------------------------------------------------------------------------------------
import dj_database_url  # noqa: E402

DATABASES = {}

if os.getenv("DATABASE_URL"):
    DATABASES["default"] = dj_database_url.config(
        conn_max_age=60,
        conn_health_checks=True,
        ssl_require=not DEBUG,
    )
else:
    DATABASES["default"] = {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DB_NAME", "shopstack"),
        "USER": os.getenv("DB_USER", "postgres"),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": os.getenv("DB_PORT", "5432"),
        "CONN_MAX_AGE": int(os.getenv("DB_CONN_MAX_AGE", "60")),
        "OPTIONS": {
            "sslmode": os.getenv("DB_SSLMODE", "require" if not DEBUG else "disable"),
            "connect_timeout": 10,
        },
    }

# --------------------------------------------------------------------------------------
# Users
# --------------------------------------------------------------------------------------
AUTH_USER_MODEL = "users.CustomUser"

# --------------------------------------------------------------------------------------
# DRF
# --------------------------------------------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": (
        "rest_framework.permissions.IsAuthenticated",
    ),
    "DEFAULT_PAGINATION_CLASS": "core.api.pagination.DefaultLimitOffsetPagination",
    "PAGE_SIZE": int(os.getenv("API_PAGE_SIZE", "10")),
    "DEFAULT_FILTER_BACKENDS": (
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.SearchFilter",
        "rest_framework.filters.OrderingFilter",
    ),
    "EXCEPTION_HANDLER": "core.exceptions.drf_exception_handler",
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.UserRateThrottle",
        "rest_framework.throttling.AnonRateThrottle",
        "rest_framework.throttling.ScopedRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "user": os.getenv("THROTTLE_USER", "1000/min"),
        "anon": os.getenv("THROTTLE_ANON", "300/min"),
        "auth_login": os.getenv("THROTTLE_AUTH_LOGIN", "30/min"),
        "checkout": os.getenv("THROTTLE_CHECKOUT", "30/min"),
        "payments": os.getenv("THROTTLE_PAYMENTS", "100/min"),
        "webhooks": os.getenv("THROTTLE_WEBHOOKS", "600/min"),
        "admin": os.getenv("THROTTLE_ADMIN", "5000/hour"),
    },
}

# --------------------------------------------------------------------------------------
# Simple JWT
# --------------------------------------------------------------------------------------
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=int(os.getenv("JWT_ACCESS_MIN", "15"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=int(os.getenv("JWT_REFRESH_DAYS", "30"))),
    "ROTATE_REFRESH_TOKENS": True,
    "BLACKLIST_AFTER_ROTATION": True,
    "UPDATE_LAST_LOGIN": True,
    "ALGORITHM": os.getenv("JWT_ALG", "HS256"),
    "SIGNING_KEY": os.getenv("JWT_SIGNING_KEY", SECRET_KEY),
    "AUTH_HEADER_TYPES": ("Bearer",),
    "AUTH_HEADER_NAME": "HTTP_AUTHORIZATION",
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
}

# --------------------------------------------------------------------------------------
# Cache (Redis)
# --------------------------------------------------------------------------------------
REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/1")

CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": REDIS_URL,
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
            # Requests must not hang when Redis is slow or down
            "IGNORE_EXCEPTIONS": True,
            "SOCKET_CONNECT_TIMEOUT": 5,
            "SOCKET_TIMEOUT": 5,
        },
        "TIMEOUT": int(os.getenv("CACHE_TIMEOUT", "300")),
    }
}
SESSION_ENGINE = "django.contrib.sessions.backends.cached_db"
SESSION_CACHE_ALIAS = "default"

# --------------------------------------------------------------------------------------
# Passwords
# --------------------------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
     "OPTIONS": {"min_length": int(os.getenv("PASSWORD_MIN_LENGTH", "8"))}},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# --------------------------------------------------------------------------------------
# i18n
# --------------------------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

# --------------------------------------------------------------------------------------
# Static / media
# --------------------------------------------------------------------------------------
STATIC_URL = "/static/"
MEDIA_URL = "/media/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_ROOT = BASE_DIR / "media"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --------------------------------------------------------------------------------------
# Content Security Policy (API only serves JSON and the admin)
# --------------------------------------------------------------------------------------
CONTENT_SECURITY_POLICY = {
    "DIRECTIVES": {
        "default-src": ("'self'",),
        "img-src": ("'self'", "data:", "https:"),
        "frame-ancestors": ("'none'",),
    },
}

# --------------------------------------------------------------------------------------
# Stripe
# --------------------------------------------------------------------------------------
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")
STRIPE_PUBLISHABLE_KEY = os.getenv("STRIPE_PUBLISHABLE_KEY", "")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
STRIPE_API_VERSION = os.getenv("STRIPE_API_VERSION", "")
STRIPE_REQUEST_TIMEOUT = int(os.getenv("STRIPE_REQUEST_TIMEOUT", "15"))

# --------------------------------------------------------------------------------------
# Marketplace business settings
# --------------------------------------------------------------------------------------
CHECKOUT_TAX_RATE = Decimal(os.getenv("CHECKOUT_TAX_RATE", "0.05"))
DEFAULT_COMMISSION_RATE = Decimal(os.getenv("DEFAULT_COMMISSION_RATE", "10.00"))
DEFAULT_CURRENCY = os.getenv("DEFAULT_CURRENCY", "USD")
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", "5"))
DASHBOARD_CACHE_TTL = int(os.getenv("DASHBOARD_CACHE_TTL", "300"))  # seconds

# --------------------------------------------------------------------------------------
# Email
# --------------------------------------------------------------------------------------
if DEBUG:
    EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
else:
    EMAIL_BACKEND = os.getenv(
        "EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
    EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.sendgrid.net")
    EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
    EMAIL_USE_TLS = _is_truthy(os.getenv("EMAIL_USE_TLS", "1"))
    EMAIL_HOST_USER = os.getenv("EMAIL_HOST_USER", "")
    EMAIL_HOST_PASSWORD = os.getenv("EMAIL_HOST_PASSWORD", "")

DEFAULT_FROM_EMAIL = os.getenv(
    "DEFAULT_FROM_EMAIL", "Shop Stack <noreply@shopstack.com>")

# Base URL of the storefront, used in e-mail links and Stripe Connect redirects
SITE_URL = os.getenv("SITE_URL", "http://localhost:3000")

if not DEBUG and not SITE_URL.startswith("https://"):
    raise RuntimeError(f"SITE_URL must use https:// in production. Current value: {SITE_URL}")
