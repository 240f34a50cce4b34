import pytest
import yaml

from experiments.run_experiments import bonferroni_c, main, mean_ci, paired_diffs, parse_args, plot_utilization
from experiments.scenarios import HIGH_LOAD_SCENARIOS, SCENARIOS


def test_mean_ci():
    assert mean_ci([], 0.95) == (0.0, 0.0)
    assert mean_ci([4.0], 0.95) == (4.0, 0.0)
    mu, half = mean_ci([1.0, 2.0, 3.0], 0.95)
    assert mu == 2.0
    assert half > 0


def test_bonferroni_c_counts_pairwise_comparisons():
    assert bonferroni_c([]) == 1
    assert bonferroni_c([["a", "b"]]) == 1
    assert bonferroni_c([["a", "b"], ["a", "c"], ["b", "c"]]) == 3


def test_paired_diffs():
    a = [{"avg_wait": 1.0}, {"avg_wait": 2.0}]
    b = [{"avg_wait": 1.5}, {"avg_wait": 1.0}]
    assert paired_diffs(a, b) == [0.5, -1.0]


def test_scenarios_cover_every_strategy():
    assert [s["name"] for s in SCENARIOS] == ["round_robin", "shortest_queue", "random"]
    for sc in HIGH_LOAD_SCENARIOS:
        assert sc["overrides"]["shop"]["arrival_interval"] > 0
        assert "balancer" in sc["overrides"]


def test_main_runs_all_scenarios(tmp_path, capsys):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text(
        "sim: {duration: 300.0, seed: 5}\n"
        "experiments:\n"
        "  replications: 2\n"
        "  crn_compare: [[round_robin, shortest_queue], [round_robin, nope]]\n"
    )
    dump = tmp_path / "out.yaml"
    results = main(["--config", str(cfg_path), "--dump", str(dump)])

    assert set(results) == {"round_robin", "shortest_queue", "random"}
    assert all(len(r) == 2 for r in results.values())
    out = capsys.readouterr().out
    assert "Scenario: round_robin" in out
    assert "CRN paired avg-wait comparison" in out
    assert "[warn] skipping CRN entry" in out

    dumped = yaml.safe_load(dump.read_text())
    assert dumped["random"][0]["policy"] == "random"


def test_plot_utilization_writes_png(tmp_path, make_cfg):
    from checkout_sim.simulation import run_once

    results = {"round_robin": [run_once(make_cfg(sim={"duration": 120.0}))]}
    path = plot_utilization(results, out_dir=str(tmp_path))
    assert path is not None and path.endswith(".png")
    assert (tmp_path / "utilization_by_strategy.png").exists()


@pytest.mark.parametrize("value", ["0", "-3", "two"])
def test_replications_flag_rejects_non_positive_values(value):
    with pytest.raises(SystemExit):
        parse_args(["--replications", value])


def test_replications_flag_overrides_config(tmp_path):
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text("sim: {duration: 120.0, seed: 2}\nexperiments: {replications: 4}\n")
    assert parse_args(["--replications", "1"]).replications == 1
    results = main(["--config", str(cfg_path), "--replications", "1"])
    assert all(len(r) == 1 for r in results.values())
