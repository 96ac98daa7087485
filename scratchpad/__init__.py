"""Scratchpad: a self hosted note-taking server."""
