"""Orchestration over stores, clients and the reply generator."""
