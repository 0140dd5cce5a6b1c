"""Plugins bundled with plughost and advertised through its own entry points."""
