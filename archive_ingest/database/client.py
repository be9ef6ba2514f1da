"""Supabase client construction and retry logic."""

import functools
import time

from supabase import create_client

from archive_ingest.errors import ConfigurationError


def create_supabase_client(settings):
    """Create a Supabase client for one session using the service role key."""
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def with_retry(max_retries: int = 3, delay: float = 0.5):
    """Decorator to retry database operations on transient network errors.

    Catches httpx.ReadError and similar connection issues, retrying with
    exponential backoff.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_error = None
            for attempt in range(max_retries):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    # Retry on network/connection errors
                    if "ReadError" in error_type or "ConnectError" in error_type or "TimeoutException" in error_type:
                        last_error = e
                        if attempt < max_retries - 1:
                            time.sleep(delay * (2 ** attempt))  # Exponential backoff
                            continue
                    raise
            raise last_error
        return wrapper
    return decorator
