"""Generation collaborator: Anthropic client, prompt assembly and model routing."""
