"""Service integrations for the product service."""
