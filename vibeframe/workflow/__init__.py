"""Workflow vocabularies and the state machine that walks them."""
