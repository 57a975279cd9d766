"""Utility helpers for the tag reader."""
