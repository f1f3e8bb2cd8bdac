"""Persistence layer for the authentication service: users, refresh tokens, token cache."""
