# Presentation Layer
# ==================
# FastAPI routes. Import `app` from rufheld.web.app to serve it.
