# server/step_repo.py

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from .step_models import NIH, Mechanism, Step, block

_BASE_DIR = Path(__file__).resolve().parent
_DATA_PATH = _BASE_DIR / "store" / "mechanisms.json"


# ---------------------------------------------------------------------------
# Built-in content: NIH training grant
# ---------------------------------------------------------------------------

NIH_STEPS: List[Step] = [
    Step(
        mechanism=NIH,
        title="Draft Specific Aims Page",
        tip=(
            "Keep your aims page to one page, use bullet points for each aim, "
            "and start each aim with an action verb."
        ),
        details=[
            block("Keep the document to one page and concise."),
            block('Use clear action verbs for each aim (e.g., "Investigate", "Determine").'),
            block("Limit to 2–4 aims to maintain focus and feasibility."),
            block("Frame aims around a central hypothesis with alternative outcomes."),
            block("Avoid purely descriptive aims; ensure each aim tests a clear question."),
            block("Check that aims can be completed within the grant timeframe (4–5 years)."),
            block("Iteratively refine with feedback from colleagues and mentors."),
        ],
    ),
    Step(
        mechanism=NIH,
        title="Develop Research Strategy",
        tip=(
            "Structure it into Significance, Innovation, and Approach. "
            "Use sub‑headings and signpost clearly."
        ),
        details=[
            block(
                ("Significance:", True),
                " Explain the problem, knowledge gap, and impact on the field.",
            ),
            block(
                ("Innovation:", True),
                " Highlight novelty or paradigm-shifting aspects of your project.",
            ),
            block(
                ("Approach:", True),
                " Outline key experiments, preliminary data, methods, and feasibility checks.",
            ),
            block("Use clear sub-headings and logical flow to guide the reader."),
            block("Align each section with your Specific Aims and central hypothesis."),
        ],
    ),
    Step(
        mechanism=NIH,
        title="Gather Letters of Support",
        tip=(
            "Reach out early—give letter writers a summary and your CV "
            "4–6 weeks before the deadline."
        ),
        details=[
            block("Identify mentors, collaborators, and institutional contacts."),
            block("Provide a brief summary, your CV, and draft aims to each writer."),
            block("Set clear deadlines and send polite reminders one week before due date."),
            block("Confirm submission process (e.g., eRA Commons link) with letter writers."),
        ],
    ),
    Step(
        mechanism=NIH,
        title="Finalize Proposal and Budget",
        tip=(
            "Double‑check NIH budget caps and make sure your justification "
            "is concise and clear."
        ),
        details=[
            block("Review FOA budget limits and institutional guidelines."),
            block("Justify each cost item with a brief, clear rationale."),
            block("Ensure alignment between budget, Specific Aims, and research strategy."),
            block("Proofread all sections and confirm formatting per NIH requirements."),
        ],
    ),
]


class StepRepo:
    """
    In-memory registry of mechanism id -> ordered step list.

    Ships with the NIH training grant; more mechanisms can be registered
    at runtime or dropped into store/mechanisms.json.
    """

    def __init__(self, data_path: Optional[Path] = _DATA_PATH, builtins: bool = True):
        self._data_path = data_path
        self._mechanisms: Dict[str, Mechanism] = {}
        if builtins:
            self.register(NIH, "NIH Training Grant", NIH_STEPS)
        for mech in self._load():
            try:
                self.register(mech.id, mech.label, mech.steps, replace=True)
            except ValueError as e:
                print(f"[step_repo] Skipping mechanism {mech.id!r}: {e}")

    def _load(self) -> List[Mechanism]:
        import json

        if self._data_path is None or not self._data_path.exists():
            return []

        try:
            text = self._data_path.read_text(encoding="utf-8").strip()
            if not text:
                return []

            raw = json.loads(text)
        except Exception as e:
            # Bad extension file should not take the catalog down
            print(f"[step_repo] Failed to load mechanisms from {self._data_path}: {e}")
            return []

        if not isinstance(raw, list):
            print(f"[step_repo] Expected a list of mechanisms in {self._data_path}")
            return []

        mechanisms: List[Mechanism] = []
        for i, item in enumerate(raw):
            try:
                mechanisms.append(Mechanism.model_validate(item))
            except ValidationError as e:
                print(f"[step_repo] Skipping entry {i} in {self._data_path}: {e}")
        return mechanisms

    def register(
        self,
        mechanism_id: str,
        label: str,
        steps: Sequence[Step],
        replace: bool = False,
    ) -> Mechanism:
        if not steps:
            raise ValueError(f"mechanism {mechanism_id!r} needs at least one step")
        if mechanism_id in self._mechanisms and not replace:
            raise ValueError(f"mechanism {mechanism_id!r} is already registered")

        steps = [
            s if s.mechanism == mechanism_id else s.model_copy(update={"mechanism": mechanism_id})
            for s in steps
        ]
        mech = Mechanism(id=mechanism_id, label=label, steps=steps)
        self._mechanisms[mechanism_id] = mech
        return mech

    def list(self) -> List[Mechanism]:
        return list(self._mechanisms.values())

    def get(self, mechanism_id: str) -> Optional[Mechanism]:
        return self._mechanisms.get(mechanism_id)

    def steps(self, mechanism_id: str) -> List[Step]:
        """Ordered steps for a mechanism, or [] if it is not registered."""
        mech = self._mechanisms.get(mechanism_id)
        return list(mech.steps) if mech else []

    def __contains__(self, mechanism_id: object) -> bool:
        return mechanism_id in self._mechanisms


# Create a single repo instance you can import in app.py
step_repo = StepRepo()
