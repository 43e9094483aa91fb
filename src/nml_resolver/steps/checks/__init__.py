# src/nml_resolver/steps/checks/__init__.py
