# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - config/: Environment and settings management
# - cache/: In-process review response cache
# - reviews/: Wextractor Google reviews API client
# - persistence/: SQLite order repository
# - email/: SMTP transport and order email templates
#
# This layer can be replaced entirely without affecting domain/application layers.
