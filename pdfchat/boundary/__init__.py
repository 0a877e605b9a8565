"""External collaborators: embedding models, chat models and PDF text extraction."""
