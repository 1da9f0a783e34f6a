"""Database plumbing shared by the SQL-backed key-value store."""
