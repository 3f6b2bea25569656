"""Credentials infrastructure: keyring-backed persistence."""
