from pdfchat.boundary.llm.chat_client import AnswerGenerator, create_chat_model

__all__ = ["AnswerGenerator", "create_chat_model"]
