# FileMaker Data MCP Server
# File: analyzers/__init__.py
# Version: v1

"""Multi-call analyses built on top of the session: metadata export,
relationship inference, portal analysis and cross-layout search."""
