"""Environment settings loaded via pydantic-settings.

Values come from environment variables first, then a ``.env`` file in the
working directory. The field ``supabase_url`` maps to ``SUPABASE_URL`` and
so on.

Embedding provider credentials are a tagged variant rather than a free-form
map: either ``{"kind": "bearer", "token": "..."}`` or
``{"kind": "header", "name": "...", "value": "..."}`` in ``EMBEDDING_AUTH``.
The shorthands ``GEMINI_API_KEY`` / ``OPENAI_API_KEY`` become bearer auth for
their backend when ``EMBEDDING_AUTH`` is not set.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from archive_ingest.config import (
    DEFAULT_EMBEDDING_MODELS,
    DEFAULT_PHASE_TIMEOUT_SECONDS,
    MIN_TRAILING_CHUNK_TOKENS,
    STORAGE_BUCKET,
)

GEMINI_KEY_HEADER = "x-goog-api-key"


class BearerAuth(BaseModel):
    """Token sent as ``Authorization: Bearer <token>`` (or as the API key)."""
    kind: Literal["bearer"] = "bearer"
    token: str = Field(min_length=1)


class HeaderAuth(BaseModel):
    """Credential sent verbatim in a named header."""
    kind: Literal["header"] = "header"
    name: str = Field(min_length=1)
    value: str = Field(min_length=1)


ProviderAuth = Annotated[Union[BearerAuth, HeaderAuth], Field(discriminator="kind")]


class Settings(BaseSettings):
    """Archive ingest settings. Environment variables override defaults."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    storage_bucket: str = STORAGE_BUCKET

    # Embeddings
    embedding_backend: Literal["gemini", "openai"] = "gemini"
    embedding_model: str = ""
    embedding_auth: Optional[ProviderAuth] = None
    gemini_api_key: str = ""
    openai_api_key: str = ""
    openai_base_url: str = ""

    # Phase execution
    phase_timeout_seconds: float = Field(default=DEFAULT_PHASE_TIMEOUT_SECONDS, gt=0)
    min_trailing_tokens: int = Field(default=MIN_TRAILING_CHUNK_TOKENS, ge=0)

    # Logging
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_gemini_auth(self):
        # Gemini only understands its API key, as a bearer token or its own header.
        auth = self.embedding_auth
        if (
            self.embedding_backend == "gemini"
            and isinstance(auth, HeaderAuth)
            and auth.name.lower() != GEMINI_KEY_HEADER
        ):
            raise ValueError(f"Gemini embeddings accept header auth only via '{GEMINI_KEY_HEADER}'")
        return self

    def resolved_embedding_model(self) -> str:
        return self.embedding_model or DEFAULT_EMBEDDING_MODELS[self.embedding_backend]

    def resolved_embedding_auth(self):
        """Return the configured provider auth, or None when no credential is set."""
        if self.embedding_auth is not None:
            return self.embedding_auth
        key = self.gemini_api_key if self.embedding_backend == "gemini" else self.openai_api_key
        if key:
            return BearerAuth(token=key)
        return None
