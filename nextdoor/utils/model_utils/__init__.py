"""
Domain helpers layered over the SQLAlchemy models.  Routes call these
instead of touching the session directly; each module logs under its own
category and raises ``nextdoor.errors`` exceptions for user-facing failures.
"""

from . import base  # re-export to make base helpers discoverable.
