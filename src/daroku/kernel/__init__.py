"""Document models, exporter and importer."""
