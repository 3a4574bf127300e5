"""
Test suite for OrderFlow Import Service.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_import_workflow_service.py -v
"""
