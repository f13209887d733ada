"""MCP protocol layer: server bootstrap, tools and resources."""
