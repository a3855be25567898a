"""
Core infrastructure for Tuskfish: exceptions, validation and configuration.
"""
