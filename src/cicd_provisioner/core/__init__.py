"""Core provisioning logic."""
