"""Storefront catalog engine."""
