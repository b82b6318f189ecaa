"""Feedback form builder API."""
