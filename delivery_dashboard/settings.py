# delivery_dashboard/settings.py
import os
import sys
from pathlib import Path

from loguru import logger

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-only-insecure-key')
DEBUG = os.environ.get('DJANGO_DEBUG', '1') == '1'
ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'django_filters',
    # Nasze aplikacje
    'apps.core',
    'apps.projects',
    'apps.tasks',
    'apps.reports',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'delivery_dashboard.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'delivery_dashboard.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('DATABASE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LANGUAGE_CODE = 'en-us'

# Znaczniki czasu (licznik, completed_at) trzymamy jako lokalny czas bez strefy
TIME_ZONE = os.environ.get('DASHBOARD_TIME_ZONE', 'UTC')
USE_TZ = False
USE_I18N = True

STATIC_URL = 'static/'

LOGIN_URL = '/admin/login/'

DASHBOARD = {
    # Strefa dla "gołych" dat z bazy przy porównaniu z czasem ze strefą
    'LOCAL_TIME_ZONE': TIME_ZONE,
    # True = suma wag podprojektów > 100 blokuje zapis (False = tylko ostrzeżenie w logu)
    'ENFORCE_SUBPROJECT_WEIGHTS': os.environ.get('DASHBOARD_ENFORCE_WEIGHTS', '0') == '1',
    # Blokada z listy projektów uwzględnia ryzyka podprojektów
    'PORTFOLIO_BLOCK_SCOPE': True,
}

# Loguru: jeden sink na stderr, poziom z env
logger.remove()
logger.add(sys.stderr, level=os.environ.get('DASHBOARD_LOG_LEVEL', 'INFO'))
