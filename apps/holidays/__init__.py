"""Holidays app package.

Organization calendar of blackout dates on which no reservation may begin.
"""
