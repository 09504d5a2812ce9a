"""
User-management service for the Fresh Bonds marketplace.

Registers identities, authenticates them (issuing session tokens), and lets
authenticated users view and edit their own accounts.
"""
