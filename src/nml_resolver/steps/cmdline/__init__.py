# src/nml_resolver/steps/cmdline/__init__.py
