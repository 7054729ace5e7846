"""Global pytest configuration."""

import os

# Tests run against in-memory sqlite and never reach live providers
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
for _key in ("OPENAI_API_KEY", "DUFFEL_ACCESS_TOKEN", "VIATOR_API_KEY", "TRIPADVISOR_API_KEY"):
    os.environ.pop(_key, None)
