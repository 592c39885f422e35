from collections import abc
from typing import FrozenSet, Iterable, Mapping, Sequence, Union

from quizhub.client.schemas import Question

Selections = Union[Mapping[int, Iterable[int]], Sequence[Iterable[int]]]


def correct_indices(question: Question) -> FrozenSet[int]:
    return frozenset(i for i, o in enumerate(question.options) if o.is_correct)


def question_is_correct(question: Question, selected: Iterable[int]) -> bool:
    """All or nothing: the selection must be exactly the correct set.

    A question whose options carry no correct flag (including one with no
    options at all) is answered correctly only by selecting nothing.
    """
    return frozenset(int(i) for i in selected) == correct_indices(question)


def selected_for(selections: Selections, position: int) -> Iterable[int]:
    if isinstance(selections, abc.Mapping):
        return selections.get(position, ()) or ()
    return selections[position] if position < len(selections) else ()


def grade(questions: Sequence[Question], selections: Selections) -> int:
    """Number of questions answered exactly right; always within [0, len(questions)]."""
    return sum(1 for pos, q in enumerate(questions) if question_is_correct(q, selected_for(selections, pos)))
