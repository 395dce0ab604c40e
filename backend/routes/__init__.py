from .auth import router as auth_router
from .leads import router as leads_router
from .properties import router as properties_router
from .dashboard import router as dashboard_router
from .settings import router as settings_router
from .dev import router as dev_router
from .websocket import router as websocket_router
