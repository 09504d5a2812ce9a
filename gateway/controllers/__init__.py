"""Request handling for the gateway."""
