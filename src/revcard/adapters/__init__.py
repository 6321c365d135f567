"""
Adapters Module

Contains:
- api: cliente HTTP do backend
- repositories: persistência da sessão
"""
