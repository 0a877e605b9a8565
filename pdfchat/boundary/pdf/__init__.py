from pdfchat.boundary.pdf.pdf_extractor import PdfTextExtractor

__all__ = ["PdfTextExtractor"]
