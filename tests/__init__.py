# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the HQ API:
# - test_access_control.py: Sign-in gate and admin bootstrap rules
# - test_llm.py / test_schema_shape.py: Structured LLM answers
# - test_*_service.py: Services against an in-memory Supabase
# - test_routes.py: Endpoint tests with FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
