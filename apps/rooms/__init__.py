"""Rooms app package.

Catalog of reservable rooms. The reservation core only reads a room's
identity, capacity and active flag.
"""
