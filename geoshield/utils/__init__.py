"""
Utility subpackage for GeoShield:
- config_loader   → defaults, YAML loader & JSON overrides
- logging_utils   → unified logger setup
"""
