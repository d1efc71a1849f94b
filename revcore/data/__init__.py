"""Data module - entity records, money and month-key helpers."""
from revcore.data import models, money, months

__all__ = ["models", "money", "months"]
