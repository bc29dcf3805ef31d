"""
Shared Kernel

This module contains base classes and utilities shared across all domain contexts:
entities, value objects, the unit of work and the message bus.
"""
