"""Django settings for the article reward economy engine.


The engine owns the money-moving core behind the writing platform:
- Article lifecycle (draft → pending → published / rejected) with publish fees
- Wallet ledger (append-only entries, non-negative balances)
- Reading sessions gating reader rewards, writer earnings
- Promo codes, referral bonuses, writer promotion requests, payment requests


Authentication is a precondition: callers arrive as a logged-in `core.User`.
"""

import os
from pathlib import Path
from decimal import Decimal


BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if os.getenv("CSRF_TRUSTED_ORIGINS") else []

def env_bool(name, default=""):
    v = os.getenv(name, default)
    return v.lower() in ("1", "true", "yes", "on")

def env_int(name, default):
    return int(os.getenv(name, default))

def env_decimal(name, default):
    return Decimal(os.getenv(name, default))

#######################
# Economy (all amounts in rupees, 2 decimal places)
PUBLISH_FEE = env_decimal("PUBLISH_FEE", "150.00")
PUBLISH_REFUND = env_decimal("PUBLISH_REFUND", "75.00")
PROMOTION_FEE = env_decimal("PROMOTION_FEE", "100.00")  # 0 disables the fee
REFERRAL_BONUS = env_decimal("REFERRAL_BONUS", "200.00")
READER_REWARD_AMOUNT = env_decimal("READER_REWARD_AMOUNT", "0.50")
WRITER_REWARD_PER_READ = env_decimal("WRITER_REWARD_PER_READ", "0.50")

# Publish guards
MIN_ARTICLE_WORDS = env_int("MIN_ARTICLE_WORDS", "100")
MIN_TITLE_LENGTH = env_int("MIN_TITLE_LENGTH", "5")
MIN_DESCRIPTION_LENGTH = env_int("MIN_DESCRIPTION_LENGTH", "10")

# Reading sessions
MIN_READ_SECONDS = env_int("MIN_READ_SECONDS", "30")
READING_HEARTBEAT_MAX_SECONDS = env_int("READING_HEARTBEAT_MAX_SECONDS", "5")
# A heartbeat may not add more than the wall time since the previous one plus this slack
READING_HEARTBEAT_WALL_CLOCK = env_bool("READING_HEARTBEAT_WALL_CLOCK", "1")
READING_HEARTBEAT_SLACK_SECONDS = env_int("READING_HEARTBEAT_SLACK_SECONDS", "1")
#######################


INSTALLED_APPS = [
	"django.contrib.admin",
	"django.contrib.auth",
	"django.contrib.contenttypes",
	"django.contrib.sessions",
	"django.contrib.messages",
	"django.contrib.staticfiles",
	# local apps
	"core",
	"api",
	"notification_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.auth.middleware.AuthenticationMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
]


ROOT_URLCONF = "reward_economy.urls"
TEMPLATES = [
	{
		"BACKEND": "django.template.backends.django.DjangoTemplates",
		"DIRS": [],
		"APP_DIRS": True,
		"OPTIONS": {
			"context_processors": [
				"django.template.context_processors.debug",
				"django.template.context_processors.request",
				"django.contrib.auth.context_processors.auth",
				"django.contrib.messages.context_processors.messages",
			],
		},
	},
]


WSGI_APPLICATION = "reward_economy.wsgi.application"
AUTH_USER_MODEL = "core.User"


DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "reward_economy"),
            "USER": os.getenv("POSTGRES_USER", "reward_economy"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "reward_economy"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }



AUTH_PASSWORD_VALIDATORS = []


LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


LOGGING = {
	"version": 1,
	"disable_existing_loggers": False,
	"formatters": {
		"plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
	},
	"handlers": {
		"console": {"class": "logging.StreamHandler", "formatter": "plain"},
	},
	"loggers": {
		"core": {"handlers": ["console"], "level": os.getenv("LOG_LEVEL", "INFO"), "propagate": False},
		"api": {"handlers": ["console"], "level": os.getenv("LOG_LEVEL", "INFO"), "propagate": False},
	},
}


# Seeded by /api/demo/seed when DEBUG is on
DEMO_ADMIN_USERNAME = "admin"
DEMO_WRITER_USERNAME = "writer"
DEMO_READER_USERNAME = "reader"
