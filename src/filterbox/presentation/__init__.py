"""Presentation layer: the Textual demo front-end."""
