"""Text, title and markup helpers shared by the extraction pipeline."""
