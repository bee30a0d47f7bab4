"""HTTP middleware. Applied in app.main."""

from app.middleware.request_id import RequestIDLogFilter, RequestIDMiddleware

__all__ = ["RequestIDLogFilter", "RequestIDMiddleware"]
