"""Pure domain helpers — no database access anywhere in this package."""
