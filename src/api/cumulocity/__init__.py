"""Cumulocity bounded context.

Resolves authenticated Cumulocity clients for the current caller and exposes
inventory, measurement, event, alarm and tenant metadata reads as MCP tools
and prompts.
"""
