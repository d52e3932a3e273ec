"""Ticket, academic and notification services."""
