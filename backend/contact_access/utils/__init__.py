"""Utility modules for the application."""
from contact_access.utils.clock import utcnow
from contact_access.utils.logger import configure_logging, safe_repr

__all__ = [
    'configure_logging',
    'safe_repr',
    'utcnow',
]
