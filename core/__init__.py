"""Core components of the translation gateway.

This package contains the translation providers and their factory (core.trans) and the
cache-aside layer with its Redis binding (core.cache).
"""
