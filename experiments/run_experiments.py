"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs a batch of replications per scenario, and reports gender-split waits,
utilization and throughput with confidence intervals. It can also compare
scenario pairs under common random numbers and save wait histograms.

Run with: python -m experiments.run_experiments [path/to/config.yaml]
"""

from __future__ import annotations
import copy, logging, math, os, sys
from statistics import mean, stdev
from typing import Callable, Dict, List, Optional
import yaml
from scipy.stats import t as student_t

from restroom_sim.batch import BatchResult, run_batch
from restroom_sim.entities import FEMALE, MALE
from restroom_sim.metrics import PerCustomer, percentile
from restroom_sim.params import BatchParams
from .scenarios import SCENARIOS

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

def load_cfg(path: Optional[str] = None) -> Dict:
    with open(path or os.path.join(ROOT, "config", "baseline.yaml"), "r") as f:
        return yaml.safe_load(f)

def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new

def scenario_params(cfg: Dict, scenario: Dict, replications: Optional[int] = None) -> BatchParams:
    """BatchParams for a scenario; `replications` overrides the config's count."""
    raw = apply_overrides(cfg["params"], scenario.get("overrides", {}))
    if replications is not None:
        raw["replications"] = replications
    return BatchParams.from_dict(raw)

def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a Student-t critical value with n-1 df."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    alpha = 1.0 - level
    tcrit = student_t.ppf(1 - alpha / 2.0, n - 1)
    half = tcrit * (stdev(values) / math.sqrt(n))
    return mu, half

def sample_stddev(values: List[float]) -> float:
    """Return sample standard deviation or 0 if insufficient data."""
    if len(values) < 2:
        return 0.0
    return stdev(values)

def gender_split(pc: PerCustomer) -> Dict[str, Dict[str, float]]:
    """Pooled count, mean and p95 of total wait (seconds) per gender."""
    out: Dict[str, Dict[str, float]] = {}
    totals = pc.wait_totals()
    for g in (FEMALE, MALE):
        waits = sorted(w for w, gg in zip(totals, pc.gender) if gg == g)
        out[g] = {
            "n": len(waits),
            "avg_wait_sec": (sum(waits) / len(waits)) if waits else 0.0,
            "p95_wait_sec": percentile(waits, 0.95),
        }
    return out

def fixture_share(pc: PerCustomer, gender: str, kind: str) -> float:
    picks = [k for k, g in zip(pc.fixture_kind, pc.gender) if g == gender]
    return picks.count(kind) / len(picks) if picks else 0.0

def run_crn(cfg: Dict, sc_a: Dict, sc_b: Dict, replications: int, confidence: float, C: int,
            processes: Optional[int] = None):
    """
    Run a common-random-number comparison between two scenarios. Both batches
    share the master seed and therefore every replication seed; report paired
    differences of the per-replication mean total wait and the CI of the mean.
    """
    res_a = run_batch(scenario_params(cfg, sc_a, replications), processes=processes)
    res_b = run_batch(scenario_params(cfg, sc_b, replications), processes=processes)
    w_a = res_a.per_replication.avg_wait_total_sec
    w_b = res_b.per_replication.avg_wait_total_sec
    diffs = [b - a for a, b in zip(w_a, w_b)]
    mean_diff = mean(diffs)
    sd_diff = stdev(diffs) if len(diffs) > 1 else 0.0
    level = min(max(confidence, 0.0), 0.999999)
    # Bonferroni: each of the C comparisons gets alpha_E / C
    alpha = (1.0 - level) / max(1, C)
    df = max(1, len(diffs) - 1)
    tcrit = student_t.ppf(1 - alpha / 2.0, df)
    half = tcrit * (sd_diff / math.sqrt(len(diffs))) if len(diffs) > 1 else 0.0
    print(f"CRN paired wait comparison ({sc_b['name']} - {sc_a['name']}):")
    print("  Replication | Wait1 (s) | Wait2 (s) | Difference")
    for idx, (a, b) in enumerate(zip(w_a, w_b), start=1):
        print(f"    {idx:3d}       | {a:9.2f} | {b:9.2f} | {b - a:+.2f}")
    print(f"  Mean difference: {mean_diff:+.2f} s")
    print(f"  Std dev of differences: {sd_diff:.2f}")
    print(f"  {level*100:.1f}% CI of mean diff: {mean_diff - half:+.2f} to {mean_diff + half:+.2f} s")
    return mean_diff, half

def series(result: BatchResult, extractor: Callable[[BatchResult], List[float]]) -> List[float]:
    """Collect a numeric per-replication series from a batch result."""
    return [float(v) for v in extractor(result)]

def plot_wait_distributions(result: BatchResult, scenario_name: str) -> Optional[str]:
    """
    Persist a PNG histogram of pooled total wait (fixture + sink) split by
    gender, with each gender's p95 drawn as a dashed vertical line.
    """
    pc = result.per_customer
    if len(pc) == 0:
        return None
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    totals = pc.wait_totals()
    split = gender_split(pc)
    colors = {FEMALE: "#d97706", MALE: "#2563eb"}
    labels = {FEMALE: "Women", MALE: "Men"}
    plt.figure(figsize=(9, 5))
    for g in (FEMALE, MALE):
        waits = [w for w, gg in zip(totals, pc.gender) if gg == g]
        if not waits:
            continue
        plt.hist(waits, bins=40, alpha=0.55, color=colors[g], label=f"{labels[g]} (n={len(waits)})")
        plt.axvline(split[g]["p95_wait_sec"], color=colors[g], linestyle="--", label=f"{labels[g]} p95")
    plt.xlim(left=0)
    plt.xlabel("Total wait (seconds)")
    plt.ylabel("Customers")
    plt.title(f"{scenario_name}: wait distribution by gender")
    plt.legend()
    plt.grid(True, linestyle="--", alpha=0.4)
    out_dir = os.path.join(ROOT, "experiments", "output")
    os.makedirs(out_dir, exist_ok=True)
    safe_name = scenario_name.lower().replace(" ", "_")
    out_path = os.path.join(out_dir, f"{safe_name}_wait_hist.png")
    plt.tight_layout()
    plt.savefig(out_path, dpi=160)
    plt.close()
    return out_path

def main(argv: Optional[List[str]] = None):
    """Entry point: drive all scenarios, replications, and report KPIs."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    argv = sys.argv[1:] if argv is None else argv
    cfg = load_cfg(argv[0] if argv else None)
    exp_cfg = cfg.get("experiments", {})
    replications = max(1, int(exp_cfg.get("replications", cfg["params"].get("replications", 1))))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    processes = int(exp_cfg.get("processes", 1))
    level_pct = confidence * 100.0

    for sc in SCENARIOS:
        params = scenario_params(cfg, sc, replications)
        res = run_batch(params, processes=processes)
        pr = res.per_replication

        avg_wait = mean_ci(series(res, lambda r: r.per_replication.avg_wait_total_sec), confidence)
        p95_wait = mean_ci(series(res, lambda r: r.per_replication.p95_wait_total_sec), confidence)
        util_stall = mean_ci(pr.util_stall, confidence)
        util_urinal = mean_ci(pr.util_urinal, confidence)
        util_sink = mean_ci(pr.util_sink, confidence)
        throughput = mean_ci(pr.throughput_per_hour, confidence)
        wait_sd = sample_stddev(pr.avg_wait_total_sec)
        split = gender_split(res.per_customer)
        plot_path = plot_wait_distributions(res, sc["name"])

        print(f"Scenario: {sc['name']} (replications={replications}, {level_pct:.1f}% CI, "
              f"seed {params.seed}, warm-up {res.meta['warmupMin']:.2f} min)")
        print(f"  Avg total wait: {avg_wait[0]:.1f} ± {avg_wait[1]:.1f} s (sd across reps {wait_sd:.1f})")
        print(f"  p95 total wait: {p95_wait[0]:.1f} ± {p95_wait[1]:.1f} s")
        for g, label in ((FEMALE, "women"), (MALE, "men")):
            s = split[g]
            print(f"  Pooled {label}: n={s['n']}, avg wait {s['avg_wait_sec']:.1f} s, p95 {s['p95_wait_sec']:.1f} s")
        print(f"  Men using urinals: {fixture_share(res.per_customer, MALE, 'urinal') * 100:.1f}%")
        print(f"  Utilization stall/urinal/sink: {util_stall[0]*100:.1f}% / {util_urinal[0]*100:.1f}% / {util_sink[0]*100:.1f}%")
        print(f"  Throughput: {throughput[0]:.1f} ± {throughput[1]:.1f} customers/hour")
        for note in res.meta.get("notes", []):
            print(f"  [warn] {note}")
        if plot_path:
            print(f"  Wait histogram saved to: {plot_path}")
        print("-")

    crn_pairs = exp_cfg.get("crn_compare")
    if crn_pairs:
        sc_index = {s["name"]: s for s in SCENARIOS}
        # Bonferroni: C = number of simultaneous comparisons
        C = len(crn_pairs)
        for pair in crn_pairs:
            if len(pair) != 2:
                print(f"[warn] skipping CRN entry (needs 2 names): {pair}")
                continue
            sc_a = sc_index.get(pair[0])
            sc_b = sc_index.get(pair[1])
            if sc_a and sc_b:
                print(f"\nCRN & Bonferroni Comparison: {sc_a['name']} vs {sc_b['name']} (replications={replications}, seeds shared)")
                run_crn(cfg, sc_a, sc_b, replications, confidence, C, processes=processes)
            else:
                print(f"[warn] CRN pair not found: {pair}")

if __name__ == "__main__":
    main()
