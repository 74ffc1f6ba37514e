"""
Relational store for the studio: ORM models, wire schemas and the service
functions that read and write them.
"""
