"""Infrastructure layer: HTTP clients for upstream sources and caching."""
