"""Command line interface for fabenroll."""
