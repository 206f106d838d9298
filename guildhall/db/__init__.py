"""Database Package: declarative base shared by models and migrations."""
