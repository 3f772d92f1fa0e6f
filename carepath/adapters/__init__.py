"""Adapters implementing the CarePath ports (graph store, risk scorers)."""
