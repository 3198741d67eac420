"""
Application layer: services wiring core algorithms to boundary adapters.
"""
