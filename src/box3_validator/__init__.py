"""Box 3 validator: refund-claim calculation for the Dutch wealth tax."""

__version__ = "0.3.0"
