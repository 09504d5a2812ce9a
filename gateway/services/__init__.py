"""Integrations with the services behind the gateway."""
