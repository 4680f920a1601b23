"""Shared helpers: size strings, named settings, request metadata and symbol lookup"""
