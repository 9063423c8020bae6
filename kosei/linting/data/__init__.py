"""Static dictionaries used by the lint rules."""
