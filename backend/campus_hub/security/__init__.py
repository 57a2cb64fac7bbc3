# Security module
from campus_hub.security.auth import (
    get_password_hash, verify_password, create_access_token, create_token_for,
    get_current_user, require_roles, require_admin, require_admin_or_technician
)

__all__ = [
    'get_password_hash', 'verify_password', 'create_access_token', 'create_token_for',
    'get_current_user', 'require_roles', 'require_admin', 'require_admin_or_technician'
]
