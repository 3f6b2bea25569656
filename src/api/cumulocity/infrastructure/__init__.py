"""Cumulocity infrastructure: REST client and prompt files."""
