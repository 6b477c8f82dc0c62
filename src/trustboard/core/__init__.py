"""Core configuration for the Trustboard application."""
