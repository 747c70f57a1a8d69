"""Tuition center management API."""
