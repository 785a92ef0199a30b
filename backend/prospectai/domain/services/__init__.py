"""Regras puras do ProspectAI (sem banco, sem HTTP)."""
