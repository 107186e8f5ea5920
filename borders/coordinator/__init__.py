"""Border state coordinator: item-discovery driven world border."""
