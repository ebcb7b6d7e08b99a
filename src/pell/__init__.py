"""Pell — генерация решений N² = D + 2M² и сборка кандидатов 3×3.

- Pell Solution Generator со scratch-буфером на воркера
- Candidate Assembler с проверками квадратов и различности ячеек
"""

from .assembler import (
    AssemblyResult,
    CandidateAssembler,
    RejectReason,
)
from .generator import (
    PellSolutionGenerator,
    SolutionBuffer,
    SolutionBufferAllocationError,
    generate_pell_solutions,
)

__all__ = [
    "AssemblyResult",
    "CandidateAssembler",
    "RejectReason",
    "PellSolutionGenerator",
    "SolutionBuffer",
    "SolutionBufferAllocationError",
    "generate_pell_solutions",
]
