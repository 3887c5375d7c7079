"""
strata vignettes and scroll integration.

This package provides:
- Scroll event protocol and adapters feeding `strata_core` registries
- The five storage-history vignettes and a YAML-scripted vignette
- A replay runner for recorded scroll logs
"""
