"""Matcha admin and analytics API."""
