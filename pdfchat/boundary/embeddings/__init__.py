from pdfchat.boundary.embeddings.embeddings_factory import create_embeddings

__all__ = ["create_embeddings"]
