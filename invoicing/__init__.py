"""Data access for customers, invoices, line items and products."""
