"""
Fraud Detection - Transaction Record Service

A FastAPI-based microservice that records financial transactions,
enforces their validation rules, and keeps fraud-flag bookkeeping
for an external scoring process.
"""

__version__ = "0.1.0"
