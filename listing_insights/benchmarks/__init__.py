"""
Industry reference data for suggestions and health scoring.

Modules
-------
tables   : BenchmarkRange + CategoryBenchmark models, BenchmarkTables lookup,
           DEFAULT_BENCHMARKS and load_benchmark_tables() (JSON overrides).
location : State cost-of-living tiers and price factors.
"""
