"""Text extraction from documents and images."""
