# notebookchat HTTP API layer
# Created: 2026-10-08
#
# Versioned REST endpoints for the browser client, mounted at /api/v1/.
