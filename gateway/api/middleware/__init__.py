"""Middleware for the addon repository API."""
