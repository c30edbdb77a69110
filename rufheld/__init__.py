# Rufheld - Google Review Removal Backend
# ========================================
# Lets a business load its Google reviews, select negative ones for removal
# and submit that as an order.
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI routes (JSON in/out)
# - Application:    Order recording and reporting use cases
# - Domain:         Reviews, orders, pricing (no external dependencies)
# - Infrastructure: Review API, cache, SQLite, SMTP, settings

__version__ = "1.0.0"
