# Google integrations: OAuth, identity, credentials and the notebook service.
# Created: 2026-10-02
