"""Card publishing for larkcard."""
from .base import CardClient
from .lark import LarkCardClient
from .console import ConsoleCardClient
from .scheduler import CardUpdateScheduler, DEFAULT_MIN_INTERVAL

__all__ = [
    'CardClient',
    'LarkCardClient',
    'ConsoleCardClient',
    'CardUpdateScheduler',
    'DEFAULT_MIN_INTERVAL',
]
