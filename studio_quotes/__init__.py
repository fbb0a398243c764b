"""Quotation pricing, negotiation and authorization core for studio management."""

__version__ = "1.0.0"
