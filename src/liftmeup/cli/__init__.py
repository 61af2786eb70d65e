"""Command-line interface for liftmeup."""
