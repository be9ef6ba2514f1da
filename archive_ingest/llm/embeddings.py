"""Embedding generation behind one small interface per provider."""

import openai
from google.genai import errors as genai_errors

from archive_ingest.errors import ServiceUnavailable
from archive_ingest.llm.clients import create_gemini_client, create_openai_client


class GeminiEmbedder:
    """Embeds text with Gemini's embedding model."""

    provider = "gemini"

    def __init__(self, client, model: str = "text-embedding-004"):
        self._client = client
        self.model = model

    def embed(self, text: str) -> list:
        try:
            response = self._client.models.embed_content(
                model=self.model,
                contents=text,
            )
        except genai_errors.APIError as e:
            raise ServiceUnavailable(f"Gemini embedding API error: {e}") from e
        return list(response.embeddings[0].values)


class OpenAIEmbedder:
    """Embeds text with an OpenAI-compatible embeddings endpoint."""

    provider = "openai"

    def __init__(self, client, model: str = "text-embedding-3-small"):
        self._client = client
        self.model = model

    def embed(self, text: str) -> list:
        try:
            response = self._client.embeddings.create(
                model=self.model,
                input=text,
            )
        except openai.APIError as e:
            raise ServiceUnavailable(f"OpenAI embedding API error: {e}") from e
        return list(response.data[0].embedding)


def create_embedder(settings):
    """Build the configured embedder, or None when no credential is set."""
    auth = settings.resolved_embedding_auth()
    if auth is None:
        return None

    model = settings.resolved_embedding_model()
    if settings.embedding_backend == "openai":
        return OpenAIEmbedder(create_openai_client(auth, settings.openai_base_url), model)
    return GeminiEmbedder(create_gemini_client(auth), model)
