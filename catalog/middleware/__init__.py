# Middleware package init
"""
Catalog Backend: Middleware Package
====================================

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log and the exception handlers
    can read the id from its ContextVar.
"""
