"""Command-line interface for settlekit."""
