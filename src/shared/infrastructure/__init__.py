"""
Shared Infrastructure Layer
Declarative base, unit of work and structured logging
"""
