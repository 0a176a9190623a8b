"""Web module for anak-trials.

This module provides the FastAPI application that renders the children and
clinical trial pages and serves the anonymized exports.
"""
