"""
Infrastructure utilities
"""
