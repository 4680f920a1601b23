"""Diagnostics HTTP server"""
