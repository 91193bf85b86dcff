"""Render functions turning ``AppState`` into Rich renderables."""
