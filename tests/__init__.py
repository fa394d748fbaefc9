import os
import tempfile

# Settings are read once at import time; keep tests off real services.
_TEST_ROOT = tempfile.mkdtemp(prefix="job-portal-tests-")

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///" + os.path.join(_TEST_ROOT, "app.db"))
os.environ.setdefault("STORAGE_TYPE", "local")
os.environ.setdefault("LOCAL_STORAGE_DIR", os.path.join(_TEST_ROOT, "uploads"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["SENTRY_DSN"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["DEBUG"] = "false"
