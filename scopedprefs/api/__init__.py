"""
HTTP API for scoped preferences.
"""
