"""
UI-facing state for the Smart City portal.

Nothing here renders anything; the rendering layer subscribes to these stores
and draws what they hold.
"""
from .toast import ToastStore

__all__ = ["ToastStore"]
