"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from readingclub.api.v1.endpoints import (admin, auth, books, library, messages,
                                          register, security)

api_router = APIRouter()

# Login and the caller's own account
api_router.include_router(auth.router)

# Registration, pricing, payment webhook
api_router.include_router(register.router)

# Reader library & progress
api_router.include_router(library.router)

# Contact form, admin messages & notifications
api_router.include_router(messages.router)

# Admin console
api_router.include_router(books.router)
api_router.include_router(security.router)
api_router.include_router(admin.router)
