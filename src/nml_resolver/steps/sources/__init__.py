# src/nml_resolver/steps/sources/__init__.py
