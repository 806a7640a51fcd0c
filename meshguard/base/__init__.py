"""
meshguard/base
Foundational pieces the rest of the harness depends on.

WHAT'S IN THIS MODULE:
- config.py: Harness configuration (retry window, transport, mesh, edge, tokens)
- context.py: RunContext, the run-scoped bundle of collaborators
"""
