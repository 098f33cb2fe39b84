"""Reusable patterns behind the book exchange services.

Each module is a self-contained pattern: a rules engine, a workflow state
machine, a repository layer, query pagination, and domain configuration.
"""
