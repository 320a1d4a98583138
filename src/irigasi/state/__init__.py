"""State/store layer.

This package is the single source of truth for the readings currently
shown by the dashboard and for the status of the live listener feeding
them.
"""
