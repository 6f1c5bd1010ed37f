"""
API v1 Serializers.
"""
