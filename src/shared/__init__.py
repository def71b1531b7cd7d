"""
Shared Layer - Cross-Cutting Concerns
Error contract, database plumbing, observability and API middleware
"""
