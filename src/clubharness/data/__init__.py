"""Backend and payment provider access."""
