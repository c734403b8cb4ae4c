"""
Django settings for geohierarchy project.

Values come from the environment; a local .env file is loaded first.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGOSECRET", "django-insecure-geohierarchy-local")

DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "yes")

ALLOWED_HOSTS = [host.strip() for host in os.getenv("ALLOWED_HOSTS", "*").split(",") if host.strip()]

INSTALLED_APPS = [
    "django.contrib.staticfiles",
    "ninja",
    "geohierarchy",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "geohierarchy.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ],
        },
    },
]

ASGI_APPLICATION = "geohierarchy.asgi.application"

# the hierarchy tables are read through sqlalchemy, not the django orm
DATABASES = {}

LOCATION_DB = {
    "TYPE": os.getenv("LOCATION_DB_TYPE", "postgres"),
    "HOST": os.getenv("LOCATION_DB_HOST", "localhost"),
    "PORT": int(os.getenv("LOCATION_DB_PORT", "5432")),
    "NAME": os.getenv("LOCATION_DB_NAME"),
    "USER": os.getenv("LOCATION_DB_USER"),
    "PASSWORD": os.getenv("LOCATION_DB_PASSWORD"),
    "SSLMODE": os.getenv("LOCATION_DB_SSLMODE"),
    # sqlite only; empty means in memory
    "PATH": os.getenv("LOCATION_DB_PATH"),
    "POOL_SIZE": int(os.getenv("LOCATION_DB_POOL_SIZE", "5")),
    "POOL_TIMEOUT": int(os.getenv("LOCATION_DB_POOL_TIMEOUT", "30")),
}

LOG_DIR = os.getenv("LOG_DIR", str(BASE_DIR / "geohierarchy" / "logs"))

LANGUAGE_CODE = "en-us"

TIME_ZONE = "Asia/Kolkata"

USE_I18N = False

USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
