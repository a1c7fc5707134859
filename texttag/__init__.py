"""Text-unit box detection, editing and export for detection training data."""
