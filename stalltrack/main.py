from prometheus_fastapi_instrumentator import Instrumentator

from stalltrack import create_app
from stalltrack.core.config import settings
from stalltrack.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL, app_name=settings.APP_NAME)
app = create_app(settings)
instrumentator = Instrumentator()
# Middleware can't be added once the app has started, so instrument at import.
instrumentator.instrument(app).expose(app, include_in_schema=False)
