"""Outbound integrations (email delivery)."""
