"""arXiv category catalog and per-archive assistant personas."""

from pydantic import BaseModel


class ArxivCategory(BaseModel):
    code: str
    name: str


# ── Search Filter Catalog ────────────────────────────────────────────

_ARXIV_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("cs.AI", "Artificial Intelligence"),
    ("cs.CL", "Computation and Language"),
    ("cs.CV", "Computer Vision and Pattern Recognition"),
    ("cs.LG", "Machine Learning"),
    ("cs.NE", "Neural and Evolutionary Computing"),
    ("cs.RO", "Robotics"),
    ("math.AG", "Algebraic Geometry"),
    ("math.AT", "Algebraic Topology"),
    ("math.CO", "Combinatorics"),
    ("math.NT", "Number Theory"),
    ("math.ST", "Statistics Theory"),
    ("physics.quant-ph", "Quantum Physics"),
    ("physics.cond-mat", "Condensed Matter"),
    ("astro-ph", "Astrophysics"),
    ("hep-th", "High Energy Physics - Theory"),
    ("q-bio", "Quantitative Biology"),
    ("q-fin", "Quantitative Finance"),
    ("stat.ML", "Machine Learning (Statistics)"),
    ("stat.AP", "Applications"),
    ("econ.EM", "Econometrics"),
)


def get_arxiv_categories() -> list[ArxivCategory]:
    """Popular categories offered as search filters."""
    return [ArxivCategory(code=code, name=name) for code, name in _ARXIV_CATEGORIES]


# ── Prompt Personas ──────────────────────────────────────────────────

_PROFESSOR = (
    "You are a {field} professor helping a student understand this research "
    "paper. Focus on {focus}."
)

_CATEGORY_FOCUS: dict[str, tuple[str, str]] = {
    "cs": (
        "Computer Science",
        "algorithms, computational methods, software engineering principles, "
        "and theoretical computer science concepts",
    ),
    "math": (
        "Mathematics",
        "mathematical proofs, theorems, equations, and mathematical reasoning",
    ),
    "math-ph": (
        "Mathematical Physics",
        "the mathematical formalism, physical interpretations, and theoretical "
        "frameworks",
    ),
    "astro-ph": (
        "Astrophysics",
        "astronomical observations, cosmological models, stellar physics, and "
        "observational data",
    ),
    "cond-mat": (
        "Condensed Matter Physics",
        "material properties, phase transitions, quantum many-body systems, and "
        "experimental techniques",
    ),
    "gr-qc": (
        "General Relativity and Quantum Cosmology",
        "spacetime geometry, gravitational theory, and cosmological models",
    ),
    "hep-ex": (
        "High Energy Physics (Experimental)",
        "particle detector data, experimental methods, statistical analysis, and "
        "particle interactions",
    ),
    "hep-lat": (
        "High Energy Physics (Lattice)",
        "lattice field theory, numerical simulations, and computational methods "
        "in particle physics",
    ),
    "hep-ph": (
        "High Energy Physics (Phenomenology)",
        "theoretical predictions, particle physics models, and experimental "
        "implications",
    ),
    "hep-th": (
        "High Energy Physics (Theory)",
        "quantum field theory, string theory, and fundamental theoretical "
        "frameworks",
    ),
    "nucl-ex": (
        "Nuclear Physics (Experimental)",
        "nuclear reactions, experimental techniques, and nuclear structure",
    ),
    "nucl-th": (
        "Nuclear Physics (Theory)",
        "nuclear models, theoretical calculations, and nuclear structure theory",
    ),
    "physics": (
        "Physics",
        "physical principles, experimental methods, and theoretical concepts",
    ),
    "quant-ph": (
        "Quantum Physics",
        "quantum mechanics, quantum information, quantum computing, and quantum "
        "phenomena",
    ),
    "q-bio": (
        "Quantitative Biology",
        "biological modeling, computational biology, bioinformatics, and "
        "quantitative analysis of biological systems",
    ),
    "q-fin": (
        "Quantitative Finance",
        "financial models, risk analysis, econometrics, and mathematical finance",
    ),
    "stat": (
        "Statistics",
        "statistical methods, data analysis, probability theory, and statistical "
        "inference",
    ),
}


def get_category_prompt_context(category: str) -> str:
    """System persona for an archive such as "cs" or "math-ph".

    Unknown archives get a generic expert persona built from the code itself.
    """
    if category in _CATEGORY_FOCUS:
        field, focus = _CATEGORY_FOCUS[category]
        return _PROFESSOR.format(field=field, focus=focus)

    field = " ".join(word[:1].upper() + word[1:] for word in category.split("-"))
    return (
        f"You are a {field} expert helping a student understand this research "
        "paper. Draw upon your expertise in this field to explain concepts "
        "clearly and accurately."
    )
