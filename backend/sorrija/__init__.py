"""Sorrija CRM - backend."""
