"""MCP server exposing the component sync tools over stdio."""
