"""Core workout session, statistics and quest engines."""
