"""Ticketdesk API package."""
