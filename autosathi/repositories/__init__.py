"""Per-entity query modules"""
