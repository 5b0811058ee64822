"""Adapters that build STFData tables from other representations.

WHY: Exported JSON and CSV tables are edited outside the converter and
must come back as STF. Loaders live apart from the formatters because
they run in the opposite direction and have their own failure modes.

HOW: table_loader.py parses JSON (schema-validated) and CSV tables into
the core model, normalizing values to code units.
"""
