"""Sortie - swipe-to-sort review tool for video clips.

Shows one clip at a time and routes it to a destination folder, the
trash, or nowhere at all with a directional decision. Every decision
can be undone in reverse order.
"""

__version__ = "0.1.0"
