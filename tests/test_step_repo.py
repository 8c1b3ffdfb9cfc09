"""
Unit tests for grant_planner/server/step_repo.py and step_models.py

Built-in NIH content, runtime registration and the optional
mechanisms.json extension file.
"""
import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from grant_planner.server.step_models import NIH, DetailBlock, Span, Step, block
from grant_planner.server.step_repo import NIH_STEPS, StepRepo


@pytest.fixture
def repo():
    return StepRepo(data_path=None)


# ── built-in catalog ──────────────────────────────────────────────────────────

def test_nih_registered_by_default(repo):
    assert NIH in repo
    mech = repo.get(NIH)
    assert mech.label == "NIH Training Grant"
    assert len(mech.steps) == 4


def test_nih_step_titles_in_order(repo):
    assert [s.title for s in repo.steps(NIH)] == [
        "Draft Specific Aims Page",
        "Develop Research Strategy",
        "Gather Letters of Support",
        "Finalize Proposal and Budget",
    ]


def test_every_nih_step_has_tip_and_details():
    for step in NIH_STEPS:
        assert step.mechanism == NIH
        assert step.tip
        assert step.details


def test_research_strategy_emphasis_markers():
    strategy = NIH_STEPS[1]
    first = strategy.details[0]
    assert first.spans[0] == Span(text="Significance:", strong=True)
    assert first.spans[1].strong is False
    assert first.text.startswith("Significance: Explain the problem")


def test_steps_are_immutable():
    with pytest.raises(ValidationError):
        NIH_STEPS[0].title = "Something else"


def test_unknown_mechanism_has_no_steps(repo):
    assert "NSF" not in repo
    assert repo.get("NSF") is None
    assert repo.steps("NSF") == []


def test_steps_returns_a_copy(repo):
    steps = repo.steps(NIH)
    steps.clear()
    assert len(repo.steps(NIH)) == 4


# ── registration ──────────────────────────────────────────────────────────────

def test_register_new_mechanism(repo):
    mech = repo.register("NSF", "NSF CAREER", [Step(title="Project Summary", tip="One page.")])
    assert mech.steps[0].mechanism == "NSF"
    assert [m.id for m in repo.list()] == [NIH, "NSF"]


def test_register_rejects_empty_steps(repo):
    with pytest.raises(ValueError, match="at least one step"):
        repo.register("NSF", "NSF CAREER", [])


def test_register_rejects_duplicate(repo):
    with pytest.raises(ValueError, match="already registered"):
        repo.register(NIH, "NIH again", [Step(title="x", tip="y")])


def test_register_replace(repo):
    repo.register(NIH, "NIH (short)", [Step(title="Only step", tip="y")], replace=True)
    assert repo.get(NIH).label == "NIH (short)"
    assert len(repo.steps(NIH)) == 1


def test_repo_without_builtins():
    empty = StepRepo(data_path=None, builtins=False)
    assert empty.list() == []


def test_block_helper():
    b = block(("Approach:", True), " Outline experiments.")
    assert b == DetailBlock(
        spans=[Span(text="Approach:", strong=True), Span(text=" Outline experiments.")]
    )


# ── mechanisms.json ───────────────────────────────────────────────────────────

def test_loads_extra_mechanisms_from_json(tmp_path):
    path = tmp_path / "mechanisms.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "NSF",
                    "label": "NSF CAREER",
                    "steps": [
                        {
                            "title": "Project Summary",
                            "tip": "One page.",
                            "details": [{"spans": [{"text": "Overview", "strong": True}]}],
                        },
                        {"title": "Data Management Plan", "tip": "Two pages."},
                    ],
                }
            ]
        ),
        encoding="utf-8",
    )
    repo = StepRepo(data_path=path)
    assert NIH in repo
    assert [s.title for s in repo.steps("NSF")] == ["Project Summary", "Data Management Plan"]
    assert repo.steps("NSF")[0].details[0].spans[0].strong is True
    assert repo.steps("NSF")[1].mechanism == "NSF"


def test_missing_json_is_fine(tmp_path):
    repo = StepRepo(data_path=tmp_path / "nope.json")
    assert [m.id for m in repo.list()] == [NIH]


def test_empty_json_is_fine(tmp_path):
    path = tmp_path / "mechanisms.json"
    path.write_text("   ", encoding="utf-8")
    repo = StepRepo(data_path=path)
    assert [m.id for m in repo.list()] == [NIH]


def test_malformed_json_is_ignored(tmp_path, capsys):
    path = tmp_path / "mechanisms.json"
    path.write_text("{not json", encoding="utf-8")
    repo = StepRepo(data_path=path)
    assert [m.id for m in repo.list()] == [NIH]
    assert "[step_repo]" in capsys.readouterr().out


def test_invalid_entry_does_not_discard_valid_ones(tmp_path, capsys):
    path = tmp_path / "mechanisms.json"
    path.write_text(
        json.dumps(
            [
                {"id": "BROKEN", "steps": [{"tip": "no title or label"}]},
                {
                    "id": "NSF",
                    "label": "NSF CAREER",
                    "steps": [{"title": "Project Summary", "tip": "One page."}],
                },
                {"id": "EMPTY", "label": "No steps", "steps": []},
            ]
        ),
        encoding="utf-8",
    )
    repo = StepRepo(data_path=path)
    assert [m.id for m in repo.list()] == [NIH, "NSF"]
    out = capsys.readouterr().out
    assert "Skipping entry 0" in out
    assert "Skipping mechanism 'EMPTY'" in out


def test_non_list_json_is_ignored(tmp_path, capsys):
    path = tmp_path / "mechanisms.json"
    path.write_text(json.dumps({"id": "NSF"}), encoding="utf-8")
    repo = StepRepo(data_path=path)
    assert [m.id for m in repo.list()] == [NIH]
    assert "[step_repo]" in capsys.readouterr().out
