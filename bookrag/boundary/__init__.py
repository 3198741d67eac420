"""
Boundary layer for external system integrations.

Handles all interactions with external systems (vector stores, keyword
index, embedding and chat model providers, relational store, book catalog).
"""
