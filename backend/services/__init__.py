from .auth import hash_password, verify_password, create_token, get_current_user, require_roles
from .realtime import broker
from .status_config import status_store
from .system_error_logger import system_error_logger
