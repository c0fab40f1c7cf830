"""jira-cli - Jira from the command line and over MCP."""

__version__ = "0.1.0"
