"""
Services: profile synchronization, model registry and commander generation.
"""
