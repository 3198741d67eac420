"""
HTTP API layer: FastAPI application, routers and dependencies.
"""
