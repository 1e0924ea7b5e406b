"""Product catalog API with a Redis read-through cache."""
