"""Core domain & services for Orbit.

Contains the profile model and store, notification timing, reports,
persistence models, push delivery, background jobs and configuration.
"""

from .config import Settings  # noqa: F401
