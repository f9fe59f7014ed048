import os

# api.security refuses to import without a signing key
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-unit-tests-only")
os.environ.pop("PUBLIC_BASE_URL", None)
