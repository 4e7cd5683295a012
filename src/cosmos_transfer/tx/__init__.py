"""
Transaction construction, encoding and signing.
"""
