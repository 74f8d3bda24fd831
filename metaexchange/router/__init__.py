"""Router — распределение заявки по стаканам нескольких бирж.

- Candidate Ranker: глобальный порядок заявок по цене
- Feasibility Check: проверка суммарных средств до allocation
- Greedy Allocation Engine: исполнение с изменением снапшотов
- Execution Plan Assembler: средневзвешенная цена
"""

from .allocation import (
    AllocationInvariantError,
    AllocationResult,
    SkippedCandidate,
    allocate,
)
from .best_execution import (
    BestExecutionConfig,
    BestExecutionResult,
    compute_best_execution,
)
from .candidates import Candidate, TieBreak, rank_candidates
from .feasibility import FeasibilityResult, check_feasibility
from .plan import assemble_plan

__all__ = [
    "AllocationInvariantError",
    "AllocationResult",
    "SkippedCandidate",
    "allocate",
    "BestExecutionConfig",
    "BestExecutionResult",
    "compute_best_execution",
    "Candidate",
    "TieBreak",
    "rank_candidates",
    "FeasibilityResult",
    "check_feasibility",
    "assemble_plan",
]
