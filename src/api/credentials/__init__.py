"""Credentials bounded context.

Owns the locally stored Cumulocity credentials used in single-user mode:
persistence in the OS keyring, the ``creds`` CLI commands and the
``list-credentials`` MCP tool.
"""
