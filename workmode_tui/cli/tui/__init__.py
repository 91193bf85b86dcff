"""Textual console for workmode."""
