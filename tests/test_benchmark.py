"""
Benchmark Smoke Test
====================
"""

import json
import sys
from pathlib import Path

# benchmarks/ lives at the repo root, outside the installed package
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from benchmarks.benchmark import PSIBenchmark


class TestPSIBenchmark:

    def test_small_run(self, tmp_path):
        benchmark = PSIBenchmark(iterations=1, warmup=0, set_size=3, key_bits=256)
        report = benchmark.run_all()

        names = [r.name for r in report.results]
        assert "Evaluate (naive)" in names
        assert "Evaluate (Horner)" in names
        assert report.summary['polynomial_degree'] == 3

        benchmark.save_report(report, str(tmp_path))
        data = json.loads((tmp_path / "benchmark_results.json").read_text())
        assert len(data['results']) == len(report.results)
        assert "PSI Benchmark Report" in (tmp_path / "benchmark_report.md").read_text()
