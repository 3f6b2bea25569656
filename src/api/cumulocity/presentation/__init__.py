"""Cumulocity presentation layer: MCP tools and prompts."""
