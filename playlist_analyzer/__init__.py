"""YouTube playlist analysis service: background jobs, analysis cache, rate limiting."""

__version__ = "1.0.0"
