"""Source-specific importers registered in ``index_app.importer.registry``."""
