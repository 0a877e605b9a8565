"""
PDF text extraction using LangChain PyPDFLoader.

Converts a PDF file into an ordered list of page texts.

Dependencies: langchain_community.document_loaders, pypdf
System role: Text extractor feeding the Ingestion Gateway
"""

from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader

from pdfchat.core.exceptions import ParsingError


class PdfTextExtractor:
    """Extract page texts from PDF documents."""

    def extract(self, file_path: str) -> list[str]:
        """
        Extract trimmed page texts in page order.

        Args:
            file_path: Path to PDF document

        Returns:
            list[str]: One entry per page

        Raises:
            ParsingError: When the file is missing, not a PDF or unreadable
        """
        path = Path(file_path)
        if not path.exists():
            raise ParsingError(f"File not found: {file_path}", file_path=file_path)

        if path.suffix.lower() != ".pdf":
            raise ParsingError(
                f"Unsupported file format: {path.suffix}. Only PDF files are supported.",
                file_path=file_path,
                file_type=path.suffix,
            )

        try:
            documents = PyPDFLoader(str(path)).load()
        except Exception as e:
            raise ParsingError(
                f"PDF processing failed: {e}",
                file_path=file_path,
                file_type="pdf",
            ) from e

        return [doc.page_content.strip() for doc in documents]
