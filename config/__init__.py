"""Top-level package for Django configuration.

This package holds the settings modules for the room reservation service
and the WSGI and ASGI entry points.
"""
