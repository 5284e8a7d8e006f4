"""Session persistence gateway."""
