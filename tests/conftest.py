"""
Test configuration — sets required env vars before any imports.
"""

import json
import os

# Dummy env vars so Settings() doesn't fail during test collection.
# These are never used for real calls — the metrics API and JWKS are mocked.
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("METRICS_API_URL", "https://metrics.test")

os.environ.setdefault(
    "USER_CONFIGS",
    json.dumps(
        {
            "ana@hotel.test": {
                "tenant_id": "grupo-sol",
                "full_name": "Ana Ruiz",
                "role": "manager",
                "profileImage": "ana.png",
            },
            "former@hotel.test": {"tenant_id": "grupo-sol", "status": "inactive"},
            "orphan@hotel.test": {"tenant_id": "grupo-desconocido"},
        }
    ),
)
os.environ.setdefault(
    "HOTEL_GROUP_CONFIGS",
    json.dumps({"grupo-sol": {"id": ["h1", "h2", "h3"], "name": "Grupo Sol"}}),
)
os.environ.setdefault(
    "HOTEL_CONFIGS",
    json.dumps(
        {
            "h1": {
                "name": "Sol Playa",
                "stars": 4,
                "rooms": 120,
                "location": "Málaga",
                "postgres": {"host": "db.internal", "password": "secret"},
            },
            "h2": {"name": "Sol Centro", "stars": 3, "rooms": 80, "location": "Sevilla"},
        }
    ),
)
