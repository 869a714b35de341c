"""Cloudant backed storage for ground truth data."""
