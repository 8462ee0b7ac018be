"""Physical photo store and frame rendering."""

from .images import ImageStorage
from .render import render_for_frame, bar_ratio

__all__ = ['ImageStorage', 'render_for_frame', 'bar_ratio']
