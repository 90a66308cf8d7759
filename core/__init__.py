"""
Core package for security performance service entrypoints and result objects.

The calculation engine lives in ``security_performance_engine``; this package
wraps it for service/API consumers:
  core.security_performance.analyze_security_performance → SecurityPerformanceResult
"""
