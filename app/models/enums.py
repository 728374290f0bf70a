"""Centralized Enum Definitions"""

import enum


class InvoiceStatus(str, enum.Enum):
    """Invoice payment status"""
    PENDING = "pending"
    PAID = "paid"
