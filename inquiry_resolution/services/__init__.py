"""Matching, change detection, resolution and commit services.

Import services from their modules; the repositories they need are passed
in by the caller, so nothing here touches a database at import time.
"""
