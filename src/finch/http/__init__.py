"""HTTP primitives — immutable request, headers, query params, and responses."""
