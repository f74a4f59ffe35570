"""Packaged string tables, one ``<culture>.yaml`` per locale."""
