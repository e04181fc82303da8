"""
Database configuration for the Dropship Store API.

Supports multiple deployment scenarios:
- Local development and tests (SQLite)
- Managed PostgreSQL via DATABASE_URL (Render, RDS, ...)
- PostgreSQL via individual PG* / DB_* environment variables
"""
import os
import re
from pathlib import Path


def get_database_config(base_dir: Path) -> dict:
    """
    Returns database configuration based on environment.

    Supports:
    - DATABASE_URL format: postgres[ql]://user:pass@host[:port]/dbname
    - Individual env vars: DB_HOST / PGHOST, DB_NAME / PGDATABASE, etc.
    - Fallback to SQLite for development

    SSL:
    - PGSSLMODE=require forces sslmode=require
    - PGSSLMODE=disable turns SSL off for DATABASE_URL connections
    """
    database_url = os.getenv('DATABASE_URL', '')

    # Option 1: Parse DATABASE_URL
    if database_url and database_url.startswith('postgres'):
        return _parse_database_url(database_url)

    # Option 2: Use individual environment variables
    db_host = os.getenv('DB_HOST') or os.getenv('PGHOST')
    if db_host:
        return _get_env_config(db_host)

    # Option 3: Fallback to SQLite (development)
    return {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': base_dir / 'db.sqlite3',
    }


def _parse_database_url(url: str) -> dict:
    """Parse PostgreSQL DATABASE_URL into Django config."""
    pattern = (
        r'postgres(?:ql)?://(?P<user>[^:]+):(?P<password>[^@]+)@'
        r'(?P<host>[^:/]+)(?::(?P<port>\d+))?/(?P<name>[^?]+)'
    )
    match = re.match(pattern, url)

    if not match:
        raise ValueError("Invalid DATABASE_URL format")

    config = {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': match.group('name'),
        'USER': match.group('user'),
        'PASSWORD': match.group('password'),
        'HOST': match.group('host'),
        'PORT': match.group('port') or '5432',
        'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '60')),
    }

    # Hosted Postgres expects SSL unless explicitly disabled
    if os.getenv('PGSSLMODE', '').lower() != 'disable':
        config['OPTIONS'] = {'sslmode': 'require'}

    # Lambda-specific optimizations
    if os.getenv('AWS_LAMBDA_FUNCTION_NAME'):
        config['CONN_MAX_AGE'] = 0
        config.setdefault('OPTIONS', {})
        config['OPTIONS']['connect_timeout'] = 5

    return config


def _get_env_config(db_host: str) -> dict:
    """Build config from individual environment variables."""
    config = {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.getenv('DB_NAME') or os.getenv('PGDATABASE', 'snuggleup'),
        'USER': os.getenv('DB_USER') or os.getenv('PGUSER', 'postgres'),
        'HOST': db_host,
        'PORT': os.getenv('DB_PORT') or os.getenv('PGPORT', '5432'),
    }

    password = os.getenv('DB_PASSWORD') or os.getenv('PGPASSWORD')
    if password:
        config['PASSWORD'] = password

    if os.getenv('PGSSLMODE', '').lower() == 'require':
        config['OPTIONS'] = {
            'sslmode': 'require',
        }

    # Lambda optimizations
    if os.getenv('AWS_LAMBDA_FUNCTION_NAME'):
        config['CONN_MAX_AGE'] = 0
        config['OPTIONS'] = config.get('OPTIONS', {})
        config['OPTIONS']['connect_timeout'] = 5

    return config
