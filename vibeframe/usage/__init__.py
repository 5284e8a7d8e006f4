"""Background usage accounting."""
