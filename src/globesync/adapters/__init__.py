"""Adapters binding the domain ports to feeds and storage."""
