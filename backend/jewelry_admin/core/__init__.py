"""Cross-cutting error types and user notifications."""
