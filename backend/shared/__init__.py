"""
Shared module for common utilities used by menu_core and the CLI.

STRUCTURE:
- shared.infrastructure: Database and operation context
  - db.py: SQLAlchemy engine and sessions, safe_commit()
  - correlation.py: operation IDs attached to every log line

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: ItemType, EntityKind, WeekDay, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input validation
  - admin_schemas.py: Pydantic output schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db_context, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import ItemType, EntityKind
    from shared.utils.exceptions import NotFoundError, ResourceInUseError
    from shared.utils.validators import validate_price
"""

# This module provides no re-exports.
# All imports should use the canonical paths as documented above.
