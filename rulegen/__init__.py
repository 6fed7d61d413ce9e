"""
rulegen Package
===============

Constructive rule generation for 2D arcade games described in the
rule language.

- rule_core: level analysis, sprite classification and rule synthesis
- evaluation: seed bank harness checking generated games are well formed

All tunable parameters are in rule_config.yaml.
"""

__version__ = "0.1.0"
