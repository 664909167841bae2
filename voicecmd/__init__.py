"""Voicecmd - map spoken requests to code editor commands."""

__version__ = "0.1.0"
