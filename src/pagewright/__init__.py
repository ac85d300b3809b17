"""pagewright: prompt-driven HTML page editing with a modification ledger."""

__version__ = "0.1.0"
