# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Image storage, portfolio, directory and profile services
# - ports.py: Interfaces of the collaborators the services depend on
#
# Code in this package should NOT import from FastAPI routers.
# Services receive their collaborators through their constructors, which
# keeps the logic testable and reusable.
# =============================================================================
