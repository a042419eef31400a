"""Heuristic scoring service for the investment platform (reliability, risk, leader performance)."""

__version__ = "0.1.0"
