"""Core domain layer: error taxonomy and the retrieval pipeline."""
