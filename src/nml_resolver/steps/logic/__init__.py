# src/nml_resolver/steps/logic/__init__.py
