"""Scratchpad web server."""
