"""
Core tiercache Package

Contains the cache layer, configuration and error handling.
"""
