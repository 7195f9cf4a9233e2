"""
Job portal authentication backend.
"""
