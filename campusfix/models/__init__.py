"""Campus map and ticket models."""
