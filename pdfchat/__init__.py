"""
pdfchat - retrieval-augmented chat over typed text and uploaded PDFs.

Text is chunked, embedded and kept in a persistent exact-search vector index;
each chat message retrieves the closest passages as context for a chat model.
"""

__version__ = "0.1.0"
