"""Request controllers for the user service."""
