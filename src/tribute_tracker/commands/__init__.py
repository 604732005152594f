"""Command handlers: each takes (ctx, args) and returns an exit code."""
