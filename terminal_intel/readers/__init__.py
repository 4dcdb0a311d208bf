"""
Readers for external inputs (entry CSV).
"""
