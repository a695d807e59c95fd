"""Integration tests for the replate client.

These tests require a running Replate backend reachable at API_BASE_URL.

Run with: API_BASE_URL=http://localhost:8000/api pytest tests/integration/ -v
Skip with: pytest -m "not integration"
"""
