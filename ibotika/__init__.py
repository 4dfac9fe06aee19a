"""Pharmacy appointment booking service."""
