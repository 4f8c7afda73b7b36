"""
application - Per-session state and session start-up services.

Depends on domain/ only.
"""
