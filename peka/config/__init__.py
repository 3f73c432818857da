"""Configuration settings and constants for peka.

Everything lives in :mod:`peka.config.settings`; this package re-exports it
so callers can write ``from peka.config import VAULT_EXTENSION``.
"""

from .settings import *  # noqa: F401,F403
from .settings import __all__  # noqa: F401
