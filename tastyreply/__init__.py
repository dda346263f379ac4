"""TastyReply: review aggregation and reply generation backend."""

__version__ = "0.1.0"
