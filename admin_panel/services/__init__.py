"""
Service Layer

Operations behind the API endpoints. Each takes a database session,
raw arguments and the caller resolved from the session token.
"""
