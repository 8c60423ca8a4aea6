"""Create all tables directly, bypassing Alembic (local SQLite / throwaway DBs).

Usage: DATABASE_URL=sqlite:///./fridgechef.db python scripts/init_db.py
"""
import sys
import os

# Setup path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from fridgechef.db import create_all, get_engine

if __name__ == "__main__":
    create_all()
    print(f"Tables created on {get_engine().url.render_as_string(hide_password=True)}")
