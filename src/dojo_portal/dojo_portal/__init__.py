"""Dojo Portal package.

Feature modules (users, sessions, payments, admissions) each carry a model,
a repository interface, a MySQL repository, a service and a thin Flask
controller. Wiring lives in ``container.py``.
"""
