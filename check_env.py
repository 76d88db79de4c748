#!/usr/bin/env python3
"""Check the dispatch optimizer's .env file and create a template when it is missing."""

import os
import sys
from pathlib import Path

ENV_TEMPLATE = """# Supabase (required: workers, jobs and skills are read from and written back to it)
FIELDROUTE_SUPABASE_URL=https://your-project-id.supabase.co
FIELDROUTE_SUPABASE_KEY=your-service-role-key-here

# API
FIELDROUTE_API_PREFIX=/api
# FIELDROUTE_FRONTEND_ALLOWED_ORIGINS accepts a JSON array or a comma-separated list

# Dispatch tuning
FIELDROUTE_TIMEZONE=America/Chicago
FIELDROUTE_AVERAGE_SPEED_MPH=30
FIELDROUTE_DEFAULT_START_HOUR=8
FIELDROUTE_MAX_JOBS_PER_WORKER=12

# Run outputs (summary.json / routes.csv per run)
FIELDROUTE_DATA_ROOT=./data
FIELDROUTE_SAVE_RUN_OUTPUTS=true
"""

SECRET_KEYS = ("FIELDROUTE_SUPABASE_KEY",)


def _masked(line: str) -> str:
    key, sep, value = line.partition("=")
    value = value.strip()
    if sep and key.strip() in SECRET_KEYS and len(value) > 20:
        return f"{key}={value[:20]}...{value[-10:]}"
    return line


def main() -> int:
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Dispatch optimizer environment checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"❌ .env file NOT found; created a template at {env_file}")
        print("⚠️  Edit it and add your Supabase credentials, then run this again.")
        return 1

    print(f"✅ Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_masked(line))
    print("-" * 60)
    print()

    sys.path.insert(0, str(project_root / "src"))
    try:
        from fieldroute.config import settings
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return 1

    for label, value in (("SUPABASE_URL", settings.supabase_url), ("SUPABASE_KEY", settings.supabase_key)):
        source = "environment" if os.getenv(f"FIELDROUTE_{label}") else ".env"
        if value:
            print(f"✅ Config loaded {label} ({source}): {value[:20]}...")
        else:
            print(f"❌ Config {label} is not set")

    print(f"   timezone={settings.timezone} speed={settings.average_speed_mph} mph "
          f"start={settings.default_start_hour}:00 capacity={settings.max_jobs_per_worker}")
    print()

    if settings.supabase_url and settings.supabase_key:
        print("✅ SUCCESS: Supabase is configured!")
        return 0

    print("❌ ERROR: Supabase is NOT configured")
    print("Make sure variables start with the FIELDROUTE_ prefix and restart the API after editing .env")
    return 1


if __name__ == "__main__":
    sys.exit(main())
