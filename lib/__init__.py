# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase client singleton and error helpers
# - llm.py: Structured (schema-validated) LLM answers with retries
# - schema_shape.py: Compact JSON shape of a response type for prompts
# - mailer.py / email_templates.py: Postmark email delivery and templates
# - embeddings.py: Cloudflare embeddings, similarity search and reranking
# - speech.py / image_generation.py: Replicate-hosted models
# - utils.py: Shared utilities (error handling, UUID/email normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import ApplicationError, normalize_email, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "ApplicationError",
    "normalize_email",
    "normalize_uuid",
]
