"""Byte buffers, dates, task queues, object pools and logging for network programs."""

__version__ = "0.1.0"