"""Adapters layer for anak-trials.

This module contains the storage adapters that implement the port defined in
the domain layer.
"""
