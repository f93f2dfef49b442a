"""Domain layer for moneytracker application.

Services are imported from their modules (``moneytracker.domain.category``,
``moneytracker.domain.email_ingestion``, ...) so that the database layer can
import ``moneytracker.domain.entities`` without a cycle.
"""
