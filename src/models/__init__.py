"""Resource models for companies and jobs.

Each model module exposes async CRUD operations over a psycopg connection. Updates and searches are
built by the SQL layer (`src.sql`) so that every value reaches Postgres as a bound parameter.
"""
