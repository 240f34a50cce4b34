"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs multiple replications per balancing strategy, and reports KPIs with
confidence intervals. Strategy pairs can be compared with common random
numbers (same seed per replication) and Bonferroni-adjusted intervals.

    python -m experiments.run_experiments [--config PATH] [--replications R]
        [--high-load] [--plot] [--dump out.yaml] [--log-level DEBUG]
"""

from __future__ import annotations
import argparse, copy, logging, math, os
from statistics import mean, stdev
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import yaml
from scipy.stats import t as student_t

from checkout_sim.config import ROOT, apply_overrides, load_cfg, validate_cfg
from checkout_sim.simulation import run_once

from .scenarios import HIGH_LOAD_SCENARIOS, SCENARIOS

logger = logging.getLogger(__name__)

OUT_DIR = os.path.join(ROOT, "experiments", "output")

def t_critical(confidence_level: float, df: int) -> float:
    level = min(max(confidence_level, 0.0), 0.999999)
    return float(student_t.ppf(1 - (1.0 - level) / 2.0, df))

def mean_ci(values: List[float], confidence_level: float) -> Tuple[float, float]:
    """Return (mean, half-width) using a Student t critical value."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    half = t_critical(confidence_level, n - 1) * (stdev(values) / math.sqrt(n))
    return mu, half

def sample_stddev(values: List[float]) -> float:
    """Return sample standard deviation or 0 if insufficient data."""
    if len(values) < 2:
        return 0.0
    return stdev(values)

def series(results: List[Dict], extractor: Callable[[Dict], float]) -> List[float]:
    """Collect a numeric series from each replication result."""
    return [float(extractor(res)) for res in results]

def avg_per_cashier(results: List[Dict], key: str) -> List[float]:
    """Average a per-cashier field (e.g. utilization_rate) across replications."""
    if not results:
        return []
    n = len(results[0]["cashiers"])
    return [mean(float(res["cashiers"][i][key]) for res in results) for i in range(n)]

def run_replications(cfg: Dict, scenario: Dict, replications: int, base_seed: int) -> List[Dict]:
    sc_cfg = apply_overrides(cfg, scenario["overrides"])
    validate_cfg(sc_cfg)
    results = []
    for rep in range(replications):
        run_cfg = copy.deepcopy(sc_cfg)
        # Same seed stream for every scenario so strategies see identical demand.
        run_cfg["sim"]["seed"] = base_seed + rep
        results.append(run_once(run_cfg))
    return results

def report(name: str, results: List[Dict], confidence: float, seeds: Tuple[int, int]):
    level_pct = confidence * 100.0
    wait = mean_ci(series(results, lambda r: r["avg_wait"]), confidence)
    svc = mean_ci(series(results, lambda r: r["avg_service_time"]), confidence)
    util = mean_ci(series(results, lambda r: r["mean_utilization"]), confidence)
    eff = mean_ci(series(results, lambda r: r["balancing_efficiency"]), confidence)
    served = mean_ci(series(results, lambda r: r["customers_served"]), confidence)
    left = mean_ci(series(results, lambda r: r["customers_in_system"]), confidence)
    wait_sd = sample_stddev(series(results, lambda r: r["avg_wait"]))
    per_cashier = [round(u, 1) for u in avg_per_cashier(results, "utilization_rate")]
    assignments = [round(a, 1) for a in avg_per_cashier(results, "customers_assigned")]

    print(f"Scenario: {name} (replications={len(results)}, {level_pct:.1f}% CI, seeds {seeds[0]}-{seeds[1]})")
    print(f"  Avg wait: {wait[0]:.2f} ± {wait[1]:.2f} s (sd {wait_sd:.2f})")
    print(f"  Avg service time: {svc[0]:.2f} ± {svc[1]:.2f} s")
    print(f"  Mean utilization: {util[0]:.1f}% ± {util[1]:.1f}%")
    print(f"  Balancing efficiency: {eff[0]:.1f}% ± {eff[1]:.1f}%")
    print(f"  Served/run: {served[0]:.1f} ± {served[1]:.1f}")
    print(f"  Left in system at end: {left[0]:.1f} ± {left[1]:.1f}")
    print(f"  Utilization by cashier (mean % busy): {per_cashier}")
    print(f"  Assignments by cashier (mean): {assignments}")
    print("-")

def paired_diffs(results_a: List[Dict], results_b: List[Dict], key: str = "avg_wait") -> List[float]:
    return [float(b[key]) - float(a[key]) for a, b in zip(results_a, results_b)]

def run_crn(name_a: str, name_b: str, results_a: List[Dict], results_b: List[Dict],
            base_seed: int, confidence: float, C: int):
    """
    Report the paired difference in average wait between two strategies run on
    common random numbers, with a Bonferroni-adjusted CI (alpha / C).
    """
    diffs = paired_diffs(results_a, results_b)
    mean_diff = mean(diffs) if diffs else 0.0
    sd_diff = stdev(diffs) if len(diffs) > 1 else 0.0
    level = min(max(confidence, 0.0), 0.999999)
    alpha = (1.0 - level) / max(1, C)
    half = 0.0
    if len(diffs) > 1:
        half = t_critical(1.0 - alpha, len(diffs) - 1) * (sd_diff / math.sqrt(len(diffs)))
    print(f"CRN paired avg-wait comparison ({name_b} - {name_a}):")
    print("  Replication | Seed | Wait1 | Wait2 | Difference")
    for idx, (a, b) in enumerate(zip(results_a, results_b)):
        print(f"    {idx + 1:2d}        | {base_seed + idx:4d} | {a['avg_wait']:.2f}s | {b['avg_wait']:.2f}s | {b['avg_wait'] - a['avg_wait']:+.2f}s")
    print(f"  Mean difference: {mean_diff:+.2f}s")
    print(f"  Std dev of differences: {sd_diff:.2f}")
    print(f"  {(1 - alpha) * 100:.2f}% CI of mean diff: {mean_diff - half:+.2f}s to {mean_diff + half:+.2f}s")

def bonferroni_c(pairs: Sequence[Sequence[str]]) -> int:
    """C = K(K-1)/2 for K alternative designs named in the comparison pairs."""
    names = {n for pair in pairs for n in pair}
    K = len(names)
    return max(1, K * (K - 1) // 2)

def plot_utilization(all_results: Dict[str, List[Dict]], out_dir: str = OUT_DIR) -> Optional[str]:
    """
    Persist a grouped bar chart of mean per-cashier utilization for each
    scenario, so the spread between cashiers is visible per strategy.
    """
    if not all_results:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    names = list(all_results)
    per_sc = [avg_per_cashier(all_results[n], "utilization_rate") for n in names]
    n_cashiers = max(len(u) for u in per_sc)
    width = 0.8 / max(1, len(names))
    plt.figure(figsize=(9, 5))
    for k, (name, utils) in enumerate(zip(names, per_sc)):
        xs = [i + k * width for i in range(len(utils))]
        plt.bar(xs, utils, width=width, label=name)
    plt.xticks([i + 0.4 - width / 2 for i in range(n_cashiers)], [f"C{i}" for i in range(n_cashiers)])
    plt.ylim(0, 100)
    plt.xlabel("Cashier")
    plt.ylabel("Utilization (% of run)")
    plt.title("Mean cashier utilization by balancing strategy")
    plt.legend()
    plt.grid(True, axis="y", linestyle="--", alpha=0.4)
    os.makedirs(out_dir, exist_ok=True)
    out_path = os.path.join(out_dir, "utilization_by_strategy.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path

def dump_summaries(all_results: Dict[str, List[Dict]], path: str):
    with open(path, "w") as f:
        yaml.safe_dump(all_results, f, sort_keys=False)

def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return value

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare checkout load-balancing strategies")
    parser.add_argument("--config", default=None, help="YAML config (default: config/baseline.yaml)")
    parser.add_argument("--replications", type=_positive_int, default=None)
    parser.add_argument("--high-load", action="store_true", help="also run the high-load scenarios")
    parser.add_argument("--plot", action="store_true", help="save a utilization bar chart")
    parser.add_argument("--dump", default=None, help="write per-replication summaries to this YAML file")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> Dict[str, List[Dict]]:
    """Entry point: drive all scenarios and replications, report KPIs."""
    args = parse_args(argv)
    if args.log_level:
        logging.basicConfig(level=args.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    cfg = load_cfg(args.config)
    exp_cfg = cfg.get("experiments", {})
    if args.replications is not None:
        replications = args.replications
    else:
        replications = max(1, int(exp_cfg.get("replications", 1)))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    base_seed = int(cfg.get("sim", {}).get("seed") or 0)
    seeds = (base_seed, base_seed + replications - 1)

    scenarios = list(SCENARIOS) + (list(HIGH_LOAD_SCENARIOS) if args.high_load else [])
    all_results: Dict[str, List[Dict]] = {}
    for sc in scenarios:
        logger.info("running scenario %s", sc["name"])
        results = run_replications(cfg, sc, replications, base_seed)
        all_results[sc["name"]] = results
        report(sc["name"], results, confidence, seeds)

    crn_pairs = exp_cfg.get("crn_compare") or []
    valid_pairs = []
    for pair in crn_pairs:
        if len(pair) != 2 or pair[0] not in all_results or pair[1] not in all_results:
            print(f"[warn] skipping CRN entry: {pair}")
            continue
        valid_pairs.append(pair)
    C = bonferroni_c(valid_pairs)
    for a, b in valid_pairs:
        print(f"\nCRN & Bonferroni comparison: {a} vs {b} (replications={replications}, seeds shared)")
        run_crn(a, b, all_results[a], all_results[b], base_seed, confidence, C)

    if args.plot:
        path = plot_utilization(all_results)
        if path:
            print(f"\nUtilization plot saved to: {path}")
    if args.dump:
        dump_summaries(all_results, args.dump)
        print(f"Summaries written to: {args.dump}")
    return all_results

if __name__ == "__main__":
    main()
