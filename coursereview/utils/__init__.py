__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "create_admin_token",
    "authenticate_user",
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "oauth2_scheme",
]


def __getattr__(name):
    if name in __all__:
        from . import security as _security
        return getattr(_security, name)
    raise AttributeError(f"module 'coursereview.utils' has no attribute '{name}'")
