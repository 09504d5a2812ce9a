"""Request controllers for the product service."""
