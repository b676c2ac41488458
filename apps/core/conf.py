# apps/core/conf.py
from django.conf import settings

DEFAULTS = {
    'LOCAL_TIME_ZONE': None,
    'ENFORCE_SUBPROJECT_WEIGHTS': False,
    'PORTFOLIO_BLOCK_SCOPE': True,
}


def dashboard_setting(name):
    """Odczyt z settings.DASHBOARD z wartościami domyślnymi."""
    value = getattr(settings, 'DASHBOARD', {}).get(name, DEFAULTS[name])
    if name == 'LOCAL_TIME_ZONE' and not value:
        return settings.TIME_ZONE
    return value
