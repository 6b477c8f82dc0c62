"""HTTP API for the Trustboard application."""
