"""Developer command-line interface for the extraction pipeline."""
