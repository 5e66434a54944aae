# tests/test_viz.py
# Agg backend is selected in conftest.py
import matplotlib.pyplot as plt

from baseline_controller import drive
from main import main
from sim.placement import enter_placement
from sim.state import NodeType
from viz.plot_utils import plot_run_summary, plot_time_series, to_columns
from viz.render import hud_text, render_plant


def test_render_grown_plant(make_state, tmp_path):
    s = make_state(rng=0)
    drive(s, 800)
    enter_placement(s, NodeType.LEAF)
    out = tmp_path / "plant.png"
    fig = render_plant(s, out_path=str(out))
    assert out.exists() and out.stat().st_size > 0
    assert not plt.fignum_exists(fig.number)


def test_render_onto_given_axes(state):
    fig, ax = plt.subplots()
    assert render_plant(state, ax=ax, show_hud=False) is fig
    plt.close(fig)


def test_hud_mentions_seed_and_day(state):
    text = hud_text(state)
    assert state.seed.name in text
    assert "Day 1 Spring" in text


def test_time_series_and_summary(make_state, tmp_path):
    s = make_state(rng=0)
    history = drive(s, 300)
    cols = to_columns(history)
    assert len(cols['health']) == len(history)

    out = tmp_path / "ts.png"
    plot_time_series(history, out_path=str(out), title="oak")
    assert out.exists()

    plot_run_summary(history, state=s, out_dir=str(tmp_path / "plots"), prefix="oak")
    summary = (tmp_path / "plots" / "oak_summary.txt").read_text()
    assert summary.startswith("final_day:")
    assert (tmp_path / "plots" / "oak_plant.png").exists()


# -------------------------
# CLI

def test_cli_list(capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "plains" in out and "sunflower" in out


def test_cli_render(tmp_path):
    out = tmp_path / "cli.png"
    assert main(["render", "--biome", "forest", "--seed", "fern", "--ticks", "60", "--out", str(out)]) == 0
    assert out.exists()


def test_cli_without_command():
    assert main([]) == 1
