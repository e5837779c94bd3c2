# FileMaker Data MCP Server
# File: transports/__init__.py
# Version: v1

"""Transport entrypoints (stdio)."""
