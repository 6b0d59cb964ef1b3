"""
PSI Benchmarking Suite
======================
Times the stages of one polynomial PSI run and compares naive against
Horner evaluation of the encrypted polynomial.
"""

import argparse
import json
import os
import platform
import statistics
import time
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import List, Dict, Any

from psi_core import (
    EncryptedPolynomial,
    EvaluationMethod,
    NumericEncoder,
    PaillierCryptosystem,
    Polynomial,
    PSIConfig,
    evaluate_encrypted,
    run_protocol
)


@dataclass
class BenchmarkResult:
    """Single benchmark measurement"""
    name: str
    iterations: int
    mean_ms: float
    std_ms: float
    min_ms: float
    max_ms: float
    total_ms: float

    def to_dict(self) -> dict:
        return {k: round(v, 4) if isinstance(v, float) else v for k, v in asdict(self).items()}


@dataclass
class BenchmarkReport:
    """Complete benchmark report"""
    timestamp: str
    system_info: Dict[str, Any]
    results: List[BenchmarkResult]
    summary: Dict[str, Any]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "system_info": self.system_info,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary
        }

    def to_json(self, indent=2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_markdown(self) -> str:
        md = []
        md.append("# PSI Benchmark Report")
        md.append(f"\n**Generated**: {self.timestamp}")
        md.append(f"**Platform**: {self.system_info.get('platform', 'Unknown')}")
        md.append(f"**Python**: {self.system_info.get('python_version', 'Unknown')}")
        md.append(f"**Key size**: {self.system_info.get('key_bits')} bits, "
                  f"**set size**: {self.system_info.get('set_size')}")

        md.append("\n## Results\n")
        md.append("| Benchmark | Mean (ms) | Std Dev | Min | Max |")
        md.append("|-----------|-----------|---------|-----|-----|")

        for r in self.results:
            md.append(f"| {r.name} | {r.mean_ms:.3f} | {r.std_ms:.3f} | {r.min_ms:.3f} | {r.max_ms:.3f} |")

        md.append("\n## Summary\n")
        for key, value in self.summary.items():
            if isinstance(value, float):
                md.append(f"- **{key}**: {value:.3f}")
            else:
                md.append(f"- **{key}**: {value}")

        return "\n".join(md)


class PSIBenchmark:
    """
    Benchmarks:
    1. Key generation
    2. Roots polynomial construction
    3. Coefficient encryption
    4. Encrypted evaluation, naive vs Horner
    5. Full protocol run
    """

    def __init__(self,
                 iterations: int = 10,
                 warmup: int = 1,
                 set_size: int = 20,
                 key_bits: int = 1024):
        self.iterations = iterations
        self.warmup = warmup
        self.set_size = set_size
        self.key_bits = key_bits
        self.results: List[BenchmarkResult] = []

        self.client_set = [i * 1.25 for i in range(set_size)]
        self.server_set = [i * 2.5 for i in range(set_size)]

    def _benchmark(self, name: str, func, *args) -> BenchmarkResult:
        times = []

        for _ in range(self.warmup):
            func(*args)

        for _ in range(self.iterations):
            start = time.perf_counter()
            func(*args)
            end = time.perf_counter()
            times.append((end - start) * 1000)

        result = BenchmarkResult(
            name=name,
            iterations=self.iterations,
            mean_ms=statistics.mean(times),
            std_ms=statistics.stdev(times) if len(times) > 1 else 0.0,
            min_ms=min(times),
            max_ms=max(times),
            total_ms=sum(times)
        )

        self.results.append(result)
        print(f"  ✓ {name}: {result.mean_ms:.3f}ms (±{result.std_ms:.3f})")

        return result

    def run_all(self) -> BenchmarkReport:
        print("=" * 60)
        print("PSI Benchmark Suite")
        print("=" * 60)
        print(f"\nIterations: {self.iterations} | Warmup: {self.warmup} | "
              f"Set size: {self.set_size} | Key: {self.key_bits} bits")
        print("-" * 60)

        cryptosystem = PaillierCryptosystem()
        config = PSIConfig(key_bits=self.key_bits)

        print("\nKey Generation")
        self._benchmark(f"Paillier keypair ({self.key_bits} bits)",
                        lambda: cryptosystem.generate_keypair(self.key_bits))
        public_key, private_key = cryptosystem.generate_keypair(self.key_bits)
        n = cryptosystem.modulus(public_key)

        encoder = NumericEncoder(n)
        roots = encoder.encode_many(self.client_set, config.encoding)
        point = encoder.encode(self.server_set[-1], config.encoding)

        print("\nClient Preparation")
        self._benchmark("Roots polynomial", lambda: Polynomial.from_roots(roots, n))
        polynomial = Polynomial.from_roots(roots, n)
        self._benchmark("Encrypt coefficients",
                        lambda: EncryptedPolynomial.encrypt(polynomial, public_key, cryptosystem))
        enc_poly = EncryptedPolynomial.encrypt(polynomial, public_key, cryptosystem)

        print("\nEncrypted Evaluation")
        naive = self._benchmark(
            "Evaluate (naive)",
            lambda: evaluate_encrypted(enc_poly, point, cryptosystem, EvaluationMethod.NAIVE))
        horner = self._benchmark(
            "Evaluate (Horner)",
            lambda: evaluate_encrypted(enc_poly, point, cryptosystem, EvaluationMethod.HORNER))

        print("\nEnd to End")
        full = self._benchmark(
            "Full protocol run",
            lambda: run_protocol(self.client_set, self.server_set, config,
                                 keypair=(public_key, private_key)))

        print("\n" + "-" * 60)

        system_info = {
            "platform": platform.platform(),
            "processor": platform.processor(),
            "python_version": platform.python_version(),
            "cryptosystem": "Paillier (python-paillier)",
            "key_bits": self.key_bits,
            "set_size": self.set_size
        }

        summary = {
            "total_benchmarks": len(self.results),
            "horner_speedup_factor": round(naive.mean_ms / horner.mean_ms, 2) if horner.mean_ms else 0.0,
            "avg_full_run_ms": round(full.mean_ms, 2),
            "polynomial_degree": polynomial.degree
        }

        report = BenchmarkReport(
            timestamp=datetime.now().isoformat(),
            system_info=system_info,
            results=self.results,
            summary=summary
        )

        print("\nSummary:")
        print(f"   Horner speedup over naive: {summary['horner_speedup_factor']}x")
        print(f"   Full run: {summary['avg_full_run_ms']}ms")

        return report

    def save_report(self, report: BenchmarkReport, output_dir: str = "."):
        json_path = os.path.join(output_dir, "benchmark_results.json")
        with open(json_path, "w") as f:
            f.write(report.to_json())
        print(f"\nJSON saved: {json_path}")

        md_path = os.path.join(output_dir, "benchmark_report.md")
        with open(md_path, "w") as f:
            f.write(report.to_markdown())
        print(f"Markdown saved: {md_path}")


def main():
    parser = argparse.ArgumentParser(description="PSI Benchmark Suite")
    parser.add_argument("--iterations", "-n", type=int, default=10,
                        help="Number of iterations per benchmark")
    parser.add_argument("--warmup", "-w", type=int, default=1,
                        help="Warmup iterations")
    parser.add_argument("--set-size", "-s", type=int, default=20,
                        help="Elements per party")
    parser.add_argument("--key-bits", "-k", type=int, default=1024,
                        help="Paillier modulus size")
    parser.add_argument("--output", "-o", type=str, default="benchmarks",
                        help="Output directory for reports")
    args = parser.parse_args()

    benchmark = PSIBenchmark(iterations=args.iterations, warmup=args.warmup,
                             set_size=args.set_size, key_bits=args.key_bits)
    report = benchmark.run_all()

    os.makedirs(args.output, exist_ok=True)
    benchmark.save_report(report, args.output)


if __name__ == "__main__":
    main()
