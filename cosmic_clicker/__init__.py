"""Cosmic Clicker simulation core and game API."""
