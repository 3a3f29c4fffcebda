"""Device registry service: a photo-backed device catalog and a
user/device assignment registry persisted in one JSON document."""

__version__ = "1.0.0"
