"""Command-line clients for the streaming intent detector."""
