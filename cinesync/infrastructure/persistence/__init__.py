"""
Persistance SQLModel/SQLite du catalogue (volumes, films, personnes).
"""
