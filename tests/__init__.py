# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the PartnerHub API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_asset_validator.py / test_asset_store.py: Image checks and storage
# - test_portfolio_manager.py / test_partner_profile.py: Profile media
# - test_geo_directory.py: Directory search
# - test_supabase_store.py: PostgREST calls of the persistence adapter
# - test_api.py: Integration tests for API endpoints
#
# Run tests with: pytest
# =============================================================================
