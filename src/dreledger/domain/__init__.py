"""Domain layer for dreledger application.

Services are imported from their modules (dreledger.domain.category, ...)
so that the database layer can load entities without pulling them in.
"""
