"""
Auth Domain - role based permission lookup.
"""
