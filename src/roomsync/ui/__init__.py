"""Presentation layer: CLI and report rendering."""
