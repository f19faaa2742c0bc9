"""
Settings entry point for the Group Ledger project.

``DJANGO_ENV=production`` selects the production settings; anything else
(including an unset variable) falls back to development.
"""
import os

_django_env = os.environ.get('DJANGO_ENV', 'development')

if _django_env == 'production':
    from config.settings.production import *  # noqa: F401, F403
else:
    from config.settings.development import *  # noqa: F401, F403
