"""Name resolution, caching, access control and response normalization."""
