"""Rocky Blog backend: cached post API with tag-based invalidation."""
