"""Vendored static web assets."""
