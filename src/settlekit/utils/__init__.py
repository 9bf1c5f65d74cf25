"""Utility modules for settlekit."""
