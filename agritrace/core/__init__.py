"""Traceability core — registry, payload builder, and the batch service."""
