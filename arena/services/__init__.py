"""Session workflow and identity services."""
