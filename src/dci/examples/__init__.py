"""Conformance examples for the DCI runtime. Importing them registers nothing."""
