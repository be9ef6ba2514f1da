"""Embedding client construction for Gemini and OpenAI-compatible providers."""

from google import genai
from openai import OpenAI

from archive_ingest.settings import BearerAuth, HeaderAuth


def create_gemini_client(auth):
    """Gemini takes its API key directly; header auth carries the same key."""
    api_key = auth.token if isinstance(auth, BearerAuth) else auth.value
    return genai.Client(api_key=api_key)


def create_openai_client(auth, base_url: str = ""):
    """OpenAI client using bearer auth, or a custom header in place of it."""
    client_kwargs = {}
    if base_url:
        client_kwargs["base_url"] = base_url
    if isinstance(auth, HeaderAuth):
        # Custom headers override the Authorization header the SDK builds.
        client_kwargs["api_key"] = "header-auth"
        client_kwargs["default_headers"] = {auth.name: auth.value}
    else:
        client_kwargs["api_key"] = auth.token
    return OpenAI(**client_kwargs)
