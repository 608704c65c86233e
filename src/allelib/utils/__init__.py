"""Shared utilities: process-wide resources and optional acceleration."""
