# =============================================================================
# lib/ - Adapters to External Systems
# =============================================================================
# This package contains adapters the services are wired to at startup:
# - supabase_client.py: Partner persistence on Supabase (Postgres + PostGIS)
#
# These modules are self-contained and can be replaced by in-memory fakes
# in tests.
# =============================================================================

from lib.supabase_client import SupabasePartnerStore

__all__ = [
    "SupabasePartnerStore",
]
