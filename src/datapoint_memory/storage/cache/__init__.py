"""TTL caches for deduplication and rate limiting."""
