"""PortSweep Test Suite

Test modules:
    test_scanner     — Scan engine: concurrency gate, ordering, progress,
                       cancellation, real loopback connects
    test_aggregator  — Result aggregation, service table, coverage checks
    test_validators  — Host / port validation and ScanSpec defaults
    test_web         — Flask API via the test client (scanner stubbed)
    test_cli         — CLI entry point, output formatting, YAML config
    test_layering    — Static import analysis enforcing architectural
                       layering rules (core / utils / reporting / web)

Run all tests:
    pytest tests/ -v
"""
