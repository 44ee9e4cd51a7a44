"""Resource adapters of the Puter client."""

from .ai import PuterAI
from .apps import PuterApps
from .auth import PuterAuth
from .fs import PuterFileSystem
from .hosting import PuterHosting, PuterSites
from .kv import PuterKV
from .usage import PuterUsage

__all__ = [
    "PuterAI",
    "PuterApps",
    "PuterAuth",
    "PuterFileSystem",
    "PuterHosting",
    "PuterKV",
    "PuterSites",
    "PuterUsage",
]
