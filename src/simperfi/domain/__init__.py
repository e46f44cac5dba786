"""Domain layer for simperfi application.

Services are imported from their modules (``simperfi.domain.trade`` etc.);
this package stays import-free so the database layer can load entities
without pulling the services in.
"""
