"""Typer command line client for the PT-Gen API."""
