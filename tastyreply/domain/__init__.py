"""Pure domain logic."""
