"""
Catalog models: problems, companies and the emitted document.

A Problem row from the Problems table is shared read-only by every Company
that links to it. Company.problems is derived from Company.solutions and
cannot be set independently.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..fields import keyify


class Problem(BaseModel):
    """A common problem with the solution and product feature that address it."""

    model_config = ConfigDict(frozen=True)

    problem: str = Field(..., description='Problem statement as written in the Problems table')
    solution: str = Field(default='', description='How the problem is solved')
    feature: str = Field(default='', description='Product feature delivering the solution')

    @property
    def key(self) -> str:
        """Normalized identity key used for matching and deduplication."""
        return keyify(self.problem)


class Company(BaseModel):
    """
    A company from the Companies table with its attached solutions.

    Mutable while link rows are reconciled (solutions grows), then emitted.
    """

    id: str = Field(..., description='Company ID column, or a slug of the name')
    name: str = Field(..., description='Display name')
    website: str = Field(default='')
    location: str = Field(default='')
    target: str = Field(default='', description='Target audience')
    org_types: list[str] = Field(
        default_factory=list, description='Organization types (unique, sheet order)'
    )
    solutions: list[Problem] = Field(default_factory=list)

    @computed_field
    @property
    def problems(self) -> list[str]:
        """Problem text of each attached solution, in attachment order."""
        return [s.problem for s in self.solutions]

    def has_solution(self, problem: Problem) -> bool:
        key = problem.key
        return any(s.key == key for s in self.solutions)

    def add_solution(self, problem: Problem) -> bool:
        """
        Attach a problem unless one with the same normalized key is present.

        Returns:
            True if the problem was appended, False if it was a duplicate
        """
        if self.has_solution(problem):
            return False
        self.solutions.append(problem)
        return True


class CatalogDocument(BaseModel):
    """The emitted JSON document: {"companies": [...]}."""

    companies: list[Company] = Field(default_factory=list)

    def to_json(self) -> str:
        """Pretty-printed JSON with 2-space indentation."""
        return self.model_dump_json(indent=2)
