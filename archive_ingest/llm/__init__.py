# LLM layer - embedding clients

from archive_ingest.llm.clients import create_gemini_client, create_openai_client

from archive_ingest.llm.embeddings import (
    GeminiEmbedder,
    OpenAIEmbedder,
    create_embedder,
)

__all__ = [
    # Clients
    "create_gemini_client",
    "create_openai_client",
    # Embedders
    "GeminiEmbedder",
    "OpenAIEmbedder",
    "create_embedder",
]
