"""Cosmos DB access: client wrapper and per-container repositories."""
