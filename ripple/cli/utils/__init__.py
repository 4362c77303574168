"""Ripple CLI utilities."""
