"""Runnable tool servers (python -m tool_servers.servers.<name>)."""
