"""Core sidebar model: tree, markup, location, storage and controller."""
