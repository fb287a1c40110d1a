# Credential Store Schema
# One row per registered local user; the email column is the identity key

CREDENTIAL_SCHEMA = """
CREATE TABLE IF NOT EXISTS user (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE NOT NULL,              -- Case-sensitive, exactly as registered
    password_hash TEXT NOT NULL,             -- bcrypt hash, never the plaintext
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_user_email ON user(email);
"""
