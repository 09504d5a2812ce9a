"""Service integrations for the user service."""
