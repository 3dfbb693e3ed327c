"""Signing order and signing status transitions."""
