"""revcore - revenue derivation and forecasting engine for a subscription business."""

__version__ = "0.1.0"
