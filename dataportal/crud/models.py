"""SQLAlchemy models for the warehouse tables that the API reads and writes."""

import sqlalchemy
from sqlalchemy import text

metadata = sqlalchemy.MetaData()

portal_users = sqlalchemy.Table(
    "portal_users",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("username", sqlalchemy.String(128), nullable=False, unique=True),
    sqlalchemy.Column("password", sqlalchemy.String(256), nullable=False),
    sqlalchemy.Column("full_name", sqlalchemy.String(256)),
    sqlalchemy.Column("role", sqlalchemy.String(64)),
    sqlalchemy.Column("is_active", sqlalchemy.Boolean, nullable=False),
    sqlalchemy.Column("last_login", sqlalchemy.DateTime),
    schema="public",
)

page_connections = sqlalchemy.Table(
    "artemis_fb_connections",
    metadata,
    sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True),
    sqlalchemy.Column("user_name", sqlalchemy.String(256)),
    sqlalchemy.Column("user_email", sqlalchemy.String(256)),
    sqlalchemy.Column("user_token", sqlalchemy.String(1024)),
    sqlalchemy.Column("page_id", sqlalchemy.String(64), nullable=False),
    sqlalchemy.Column("page_name", sqlalchemy.String(512)),
    sqlalchemy.Column("page_token", sqlalchemy.String(1024)),
    sqlalchemy.Column("page_category", sqlalchemy.String(256)),
    sqlalchemy.Column("tasks", sqlalchemy.String(1024)),
    sqlalchemy.Column("connection_type", sqlalchemy.String(32)),
    sqlalchemy.Column("connected_at", sqlalchemy.DateTime),
    sqlalchemy.Column("status", sqlalchemy.String(32)),
    schema="public",
)

# The system catalogue, for column names and types
information_schema_columns = sqlalchemy.Table(
    "columns",
    sqlalchemy.MetaData(),
    sqlalchemy.Column("table_schema", sqlalchemy.String),
    sqlalchemy.Column("table_name", sqlalchemy.String),
    sqlalchemy.Column("column_name", sqlalchemy.String),
    sqlalchemy.Column("data_type", sqlalchemy.String),
    sqlalchemy.Column("ordinal_position", sqlalchemy.Integer),
    schema="information_schema",
)

# Redshift DDL, which SQLAlchemy's PostgreSQL dialect can't emit
# (IDENTITY columns and GETDATE() defaults).
CREATE_PAGE_CONNECTIONS = text(
    """
    CREATE TABLE IF NOT EXISTS public.artemis_fb_connections (
        id              INTEGER IDENTITY(1,1) PRIMARY KEY,
        user_name       VARCHAR(256),
        user_email      VARCHAR(256),
        user_token      VARCHAR(1024),
        page_id         VARCHAR(64) NOT NULL,
        page_name       VARCHAR(512),
        page_token      VARCHAR(1024),
        page_category   VARCHAR(256),
        tasks           VARCHAR(1024),
        connection_type VARCHAR(32),
        connected_at    TIMESTAMP DEFAULT GETDATE(),
        status          VARCHAR(32) DEFAULT 'active'
    )
    """
)

CREATE_PORTAL_USERS = text(
    """
    CREATE TABLE IF NOT EXISTS public.portal_users (
        id          INTEGER IDENTITY(1,1) PRIMARY KEY,
        username    VARCHAR(128) NOT NULL UNIQUE,
        password    VARCHAR(256) NOT NULL,
        full_name   VARCHAR(256),
        role        VARCHAR(64) DEFAULT 'viewer',
        is_active   BOOLEAN DEFAULT TRUE,
        created_at  TIMESTAMP DEFAULT GETDATE(),
        last_login  TIMESTAMP
    )
    """
)
