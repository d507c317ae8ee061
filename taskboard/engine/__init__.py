"""Taskboard Engine — errors, configuration, logging and password hashing."""
