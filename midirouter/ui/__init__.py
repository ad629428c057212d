"""Terminal UI for midirouter."""
from .utils import note_to_name

__all__ = [
    'note_to_name',
]
