"""Readers for build reports."""
