"""Componentes de interface de terminal (Rich)."""
