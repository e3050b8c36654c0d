"""
Environment-driven settings.

Values come from the process environment. Outside of test runs a ``.env``
file next to the backend (or at the repository root, or in the working
directory) is loaded first with python-dotenv; variables already set in the
environment win.
"""

import os
import pathlib
import sys

from dotenv import load_dotenv


def _load_env_file() -> None:
    backend_dir = pathlib.Path(__file__).resolve().parents[2]
    for env_path in (backend_dir / ".env", backend_dir.parent / ".env", pathlib.Path.cwd() / ".env"):
        if env_path.exists():
            load_dotenv(env_path, override=False)
            return


# Test runs configure the environment themselves
if "pytest" not in sys.modules and not os.getenv("PYTEST_VERSION"):
    _load_env_file()


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://localhost/agenda_dev")

# Browser origin of the scheduling front end (CORS)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Access tokens
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Webhook sink for cancellation/change events. Empty disables delivery.
WEBHOOK_URL = os.getenv("WEBHOOK_URL") or os.getenv("N8N_WEBHOOK_URL", "")
WEBHOOK_TIMEOUT_SECONDS = float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10"))
WEBHOOK_MAX_WORKERS = int(os.getenv("WEBHOOK_MAX_WORKERS", "4"))
