#!/usr/bin/env python3
"""
Quick checks so the backend can start. Run from repo root or backend/:
  python backend/scripts/check_backend.py
  # or
  cd backend && python scripts/check_backend.py
"""
import asyncio
import os
import socket
import sys
from pathlib import Path

# Run from backend/
backend_dir = Path(__file__).resolve().parent.parent
os.chdir(backend_dir)
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))


def main():
    errors = []

    # 1) .env
    env_file = backend_dir / ".env"
    if not env_file.exists():
        print("WARN backend/.env missing (fine if the variables are exported). See backend/.env.example")
    else:
        print("OK  .env exists")

    # 2) Settings: every required credential present
    try:
        from dotenv import load_dotenv

        load_dotenv(env_file)
        from eventspace.config import get_settings

        settings = get_settings()
        print("OK  Settings (SUPABASE_URL, SUPABASE_ANON_KEY, MP_PUBLIC_KEY, MP_ACCESS_TOKEN)")
    except Exception as e:
        errors.append(f"Settings: {e}")
        print("FAIL Settings:", e)
        print("\nFix the above, then run this check again.")
        return 1

    # 3) Store reachable with the anon key
    try:
        from eventspace.core.constants import TABLE_VENUES
        from eventspace.services.store import StoreClient, StoreConfig

        store = StoreClient(StoreConfig.from_settings(settings))
        asyncio.run(store.select(TABLE_VENUES, columns="id", limit=1))
        print("OK  Store reachable (venues)")
    except Exception as e:
        errors.append(f"Store: {e}")
        print("FAIL Store:", e)

    # 4) App factory (catches missing deps, bad imports)
    try:
        from eventspace.main import create_app

        create_app(settings)
        print("OK  App factory (eventspace.main:create_app)")
    except Exception as e:
        errors.append(f"App factory: {e}")
        print("FAIL App factory:", e)

    # 5) Port 8000
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 8000))
        print("OK  Port 8000 is free")
    except OSError:
        errors.append("Port 8000 is in use. Stop the other process or use another port (e.g. --port 8001).")
        print("FAIL Port 8000 is in use")

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        print("\nThen start backend: cd backend && uvicorn eventspace.main:create_app --factory --reload")
        return 1

    print("\nAll checks passed. Start with: cd backend && uvicorn eventspace.main:create_app --factory --reload")
    return 0


if __name__ == "__main__":
    sys.exit(main())
