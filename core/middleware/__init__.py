# core/middleware/__init__.py

from .audit_middleware import AuditMiddleware

__all__ = ['AuditMiddleware']
