"""Cumulocity domain: value objects describing platform data."""
