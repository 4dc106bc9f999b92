"""Chat bot pieces: handlers, rate limiting, result storage, model and Telegram clients, and HTTP services."""

__version__ = "0.1.0"