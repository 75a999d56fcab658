"""Record, list, and replay chat session transcripts."""
