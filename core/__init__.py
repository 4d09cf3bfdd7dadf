"""Core library for prompt-catalog.

The preferred executable entrypoints remain at the repo root:
- app.py (FastAPI)
- lookup.py (CLI)
- checker.py (CLI)
- config.py (YAML config)

This package contains the reusable building blocks (parser, index, checks).
"""
