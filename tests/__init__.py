"""
Tests for cart_service
"""
