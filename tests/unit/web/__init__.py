"""Unit tests for fieldops web route modules.

Structure:
    tests/unit/web/
    ├── test_dependencies.py           # Identity headers, role gates, templates
    ├── test_routes_reports.py         # PDF export with a mocked aggregator
    └── test_service_report_flow.py    # View, actions and export on a real database

Testing pattern:
    - Use FastAPI's TestClient (or httpx AsyncClient for async fixtures)
    - Override the database dependency
    - Test auth requirements
    - Test error handling
"""
