"""Presentation layer for the Credentials bounded context."""
