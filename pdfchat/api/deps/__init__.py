from pdfchat.api.deps.dependencies import (
    ServiceCache,
    get_answer_generator,
    get_pdf_extractor,
    get_retrieval_pipeline,
    get_service_cache,
    get_settings_dependency,
)

__all__ = [
    "ServiceCache",
    "get_answer_generator",
    "get_pdf_extractor",
    "get_retrieval_pipeline",
    "get_service_cache",
    "get_settings_dependency",
]
