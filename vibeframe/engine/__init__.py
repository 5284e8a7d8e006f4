"""Generation orchestration and turn scheduling."""
